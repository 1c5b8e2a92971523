# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP middleware: request correlation and Prometheus request metrics.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from reliefconnect.core.logging import request_id_var
from reliefconnect.metrics import HTTP_ERRORS, REQUEST_COUNT, REQUEST_LATENCY

# Path segments that are route literals; anything else is an identifier.
KNOWN_SEGMENTS: frozenset[str] = frozenset({
    "api", "v1", "health", "ready", "metrics",
    "incidents", "map", "resolve",
    "resources",
    "skills", "categories",
    "volunteers", "check-in", "upcoming",
    "teams", "coverage", "leader", "members", "toggle",
    "tasks", "shifts", "availability", "check-out", "cancel",
    "dashboard", "stats", "recent-incidents",
})

UNTRACKED_PATHS: frozenset[str] = frozenset({
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
})


def normalize_path(path: str) -> str:
    """``/api/v1/teams/<uuid>/members`` becomes ``/api/v1/teams/{param}/members``."""
    segments = [s for s in path.split("/") if s]
    if not segments:
        return path
    return "/" + "/".join(s if s in KNOWN_SEGMENTS else "{param}" for s in segments)


def record_request(method: str, path: str, status_code: int, seconds: float) -> None:
    endpoint = normalize_path(path)
    status = str(status_code)
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(seconds)
    if status_code >= 400:
        HTTP_ERRORS.labels(method=method, endpoint=endpoint, status=status).inc()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint one; logs within the call carry it."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path not in UNTRACKED_PATHS:
            record_request(request.method, request.url.path, response.status_code,
                           time.perf_counter() - started)
        return response
