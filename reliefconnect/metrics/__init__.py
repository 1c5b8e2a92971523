# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics, the single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "relief_requests_total",
    "Total HTTP requests to the coordination service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "relief_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "relief_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
INCIDENTS_REPORTED = Counter(
    "relief_incidents_reported_total",
    "Total incidents reported",
    ["severity"],
)
INCIDENTS_ACTIVE = Gauge(
    "relief_incidents_active",
    "Number of incidents currently active",
)
RESOURCES_CREATED = Counter(
    "relief_resources_created_total",
    "Total resources registered",
    ["type"],
)
VOLUNTEERS_REGISTERED = Counter(
    "relief_volunteers_registered_total",
    "Total volunteers registered",
    ["experience_level"],
)
TEAMS_CREATED = Counter(
    "relief_teams_created_total",
    "Total teams created",
)
TEAM_VALIDATION_FAILURES = Counter(
    "relief_team_validation_failures_total",
    "Team writes rejected by composition validation",
)
COVERAGE_EVALUATIONS = Counter(
    "relief_coverage_evaluations_total",
    "Skill coverage evaluations performed",
    ["result"],  # complete | partial
)
SHIFTS_SCHEDULED = Counter(
    "relief_shifts_scheduled_total",
    "Total shifts scheduled",
)
SHIFT_TRANSITIONS = Counter(
    "relief_shift_transitions_total",
    "Shift status transitions",
    ["status"],
)
NOTIFICATIONS_SENT = Counter(
    "relief_notifications_sent_total",
    "Outbound notifications by outcome",
    ["channel", "outcome"],  # sent | failed
)
