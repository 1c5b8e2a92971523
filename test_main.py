# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
ReliefConnect Coordination Service: API Tests
==============================================
Run:  pytest test_main.py -v --cov=reliefconnect --cov=main --cov-report=term-missing
Each test gets a fresh schema in a throwaway SQLite database.
"""
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

_DB_DIR = tempfile.mkdtemp(prefix="reliefconnect-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["NOTIFICATION_SERVICE_URL"] = ""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from main import app
from reliefconnect.core.config import settings
from reliefconnect.core.database import engine
from reliefconnect.core.dependencies import get_notification_client, get_skill_service
from reliefconnect.core.logging import JSONFormatter, RequestContextFilter, request_id_var
from reliefconnect.core.schema import create_all, drop_all
from reliefconnect.metrics import INCIDENTS_ACTIVE
from reliefconnect.middleware import normalize_path
from reliefconnect.repositories.incident_repository import IncidentRepository
from reliefconnect.services.notification_client import NotificationClient
from reliefconnect.services.skill_service import DEFAULT_SKILLS, skill_id_for

client = TestClient(app)

FIRST_AID = skill_id_for("First Aid")
CPR = skill_id_for("CPR")
DRIVING = skill_id_for("Driving")
TRANSLATION = skill_id_for("Translation")

NEXT_WEEK = (datetime.now(timezone.utc) + timedelta(days=7)).date()


@pytest.fixture(autouse=True)
def fresh_db():
    """Rebuild the schema and reseed the skill catalog before each test."""
    drop_all(engine)
    create_all(engine)
    get_skill_service().seed_defaults()
    yield


# ── Helpers ──────────────────────────────────────────────────────────────
def _location(lat=14.6, lng=121.0, address=None):
    loc = {"lat": lat, "lng": lng}
    if address:
        loc["address"] = address
    return loc


def _incident(title="Flooding in Marikina", severity="high", incident_type="flood"):
    r = client.post("/api/v1/incidents", json={
        "title": title, "type": incident_type, "severity": severity,
        "location": _location(), "description": "River overflow",
    })
    assert r.status_code == 201, r.text
    return r.json()


def _volunteer(name="Ana Reyes", skills=None, email=None, status="active"):
    r = client.post("/api/v1/volunteers", json={
        "name": name,
        "contact_info": {"email": email or f"{name.split()[0].lower()}@relief.org"},
        "skills": skills or [],
        "location": _location(),
        "status": status,
    })
    assert r.status_code == 201, r.text
    return r.json()


def _team(name="Alpha", members=None, leader=None, skills=None, **extra):
    payload = {
        "name": name,
        "member_ids": members or [],
        "leader_id": leader,
        "required_skills": skills or [],
        **extra,
    }
    return client.post("/api/v1/teams", json=payload)


def _task(title="Sandbag the levee", **extra):
    r = client.post("/api/v1/tasks", json={"title": title, "priority": "high", **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _shift(volunteer_id, task_id, slot="morning", day=None):
    return client.post("/api/v1/shifts", json={
        "volunteer_id": volunteer_id, "task_id": task_id,
        "shift_date": (day or NEXT_WEEK).isoformat(), "slot": slot,
    })


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH, METRICS, MIDDLEWARE
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION

    def test_readiness_ok(self):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_readiness_fails_when_db_down(self):
        with patch.object(IncidentRepository, "verify_connection", side_effect=Exception("boom")):
            r = client.get("/health/ready")
        assert r.status_code == 503
        assert "boom" in r.json()["detail"]

    def test_metrics_endpoint(self):
        client.get("/api/v1/skills")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "relief_requests_total" in r.text

    def test_request_id_propagated(self):
        r = client.get("/api/v1/skills", headers={"X-Request-ID": "req-42"})
        assert r.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self):
        r = client.get("/api/v1/skills")
        assert r.headers.get("X-Request-ID")


class TestPathNormalisation:
    def test_ids_collapsed(self):
        assert normalize_path("/api/v1/teams/abc-123/members/xyz") == "/api/v1/teams/{param}/members/{param}"

    def test_known_segments_kept(self):
        assert normalize_path("/api/v1/teams/coverage") == "/api/v1/teams/coverage"

    def test_root(self):
        assert normalize_path("/") == "/"


class TestStoreFailures:
    def test_read_failure_returns_503(self):
        err = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(IncidentRepository, "list_incidents", side_effect=err):
            r = client.get("/api/v1/incidents")
        assert r.status_code == 503
        assert r.json()["error"] == "store_unavailable"

    def test_write_failure_returns_503_and_stores_nothing(self):
        err = OperationalError("INSERT", {}, Exception("disk full"))
        with patch.object(IncidentRepository, "create_incident", side_effect=err):
            r = client.post("/api/v1/incidents", json={
                "title": "Quake", "type": "earthquake", "severity": "high",
                "location": _location(),
            })
        assert r.status_code == 503
        assert client.get("/api/v1/incidents").json()["total"] == 0

    def test_failed_resolve_leaves_active_gauge_alone(self):
        iid = _incident()["id"]
        before = INCIDENTS_ACTIVE._value.get()
        err = OperationalError("UPDATE", {}, Exception("connection reset"))
        with patch.object(IncidentRepository, "update_incident", side_effect=err):
            r = client.post(f"/api/v1/incidents/{iid}/resolve")
        assert r.status_code == 503
        assert INCIDENTS_ACTIVE._value.get() == before
        assert client.get(f"/api/v1/incidents/{iid}").json()["status"] == "active"

    def test_successful_resolve_moves_active_gauge(self):
        iid = _incident()["id"]
        before = INCIDENTS_ACTIVE._value.get()
        assert client.post(f"/api/v1/incidents/{iid}/resolve").status_code == 200
        assert INCIDENTS_ACTIVE._value.get() == before - 1


# ═══════════════════════════════════════════════════════════════════════════
# INCIDENTS
# ═══════════════════════════════════════════════════════════════════════════
class TestIncidents:
    def test_report_incident(self):
        d = _incident()
        assert d["status"] == "active"
        assert d["severity"] == "high"
        assert d["location"]["lat"] == 14.6
        assert d["resolved_at"] is None

    def test_severity_normalised(self):
        r = client.post("/api/v1/incidents", json={
            "title": "Fire", "type": "fire", "severity": " HIGH ", "location": _location(),
        })
        assert r.status_code == 201
        assert r.json()["severity"] == "high"

    def test_invalid_severity_rejected(self):
        r = client.post("/api/v1/incidents", json={
            "title": "Fire", "type": "fire", "severity": "critical", "location": _location(),
        })
        assert r.status_code == 422

    def test_latitude_out_of_range_rejected(self):
        r = client.post("/api/v1/incidents", json={
            "title": "Fire", "type": "fire", "location": _location(lat=120),
        })
        assert r.status_code == 422

    def test_get_incident(self):
        iid = _incident()["id"]
        r = client.get(f"/api/v1/incidents/{iid}")
        assert r.status_code == 200
        assert r.json()["title"] == "Flooding in Marikina"

    def test_get_missing_incident(self):
        assert client.get("/api/v1/incidents/nope").status_code == 404

    def test_list_filters(self):
        _incident(title="A", severity="low", incident_type="fire")
        _incident(title="B", severity="high", incident_type="flood")
        r = client.get("/api/v1/incidents", params={"severity": "high"})
        assert r.json()["total"] == 1
        assert r.json()["incidents"][0]["title"] == "B"
        r = client.get("/api/v1/incidents", params={"type": "fire"})
        assert [i["title"] for i in r.json()["incidents"]] == ["A"]

    def test_list_pagination(self):
        for n in range(3):
            _incident(title=f"Incident {n}")
        r = client.get("/api/v1/incidents", params={"page": 2, "per_page": 2})
        d = r.json()
        assert d["total"] == 3
        assert d["page"] == 2
        assert len(d["incidents"]) == 1

    def test_partial_update(self):
        iid = _incident()["id"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"severity": "low"})
        assert r.status_code == 200
        assert r.json()["severity"] == "low"
        assert r.json()["title"] == "Flooding in Marikina"

    def test_resolve_and_reopen(self):
        iid = _incident()["id"]
        r = client.post(f"/api/v1/incidents/{iid}/resolve")
        assert r.json()["status"] == "resolved"
        assert r.json()["resolved_at"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"status": "active"})
        assert r.json()["status"] == "active"
        assert r.json()["resolved_at"] is None

    def test_same_status_is_noop(self):
        iid = _incident()["id"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"status": "active"})
        assert r.status_code == 200
        assert r.json()["updated_at"] is None

    def test_invalid_status_rejected(self):
        iid = _incident()["id"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"status": "exploded"})
        assert r.status_code == 422

    def test_update_missing_incident(self):
        assert client.patch("/api/v1/incidents/nope", json={"severity": "low"}).status_code == 404

    def test_null_clears_description(self):
        iid = _incident()["id"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"description": None})
        assert r.status_code == 200
        assert r.json()["description"] is None
        assert r.json()["title"] == "Flooding in Marikina"

    def test_null_does_not_clear_required_fields(self):
        iid = _incident()["id"]
        r = client.patch(f"/api/v1/incidents/{iid}", json={"title": None, "severity": None})
        assert r.status_code == 200
        assert r.json()["title"] == "Flooding in Marikina"
        assert r.json()["severity"] == "high"

    def test_map_shows_only_active(self):
        keep = _incident(title="Keep")["id"]
        gone = _incident(title="Gone")["id"]
        client.post(f"/api/v1/incidents/{gone}/resolve")
        markers = client.get("/api/v1/incidents/map").json()
        assert [m["id"] for m in markers] == [keep]
        assert markers[0]["lat"] == 14.6
        assert markers[0]["lng"] == 121.0


# ═══════════════════════════════════════════════════════════════════════════
# RESOURCES
# ═══════════════════════════════════════════════════════════════════════════
class TestResources:
    def _create(self, **extra):
        body = {"name": "Bottled water", "type": "water", "quantity": 500,
                "location": _location(), **extra}
        return client.post("/api/v1/resources", json=body)

    def test_create_resource(self):
        r = self._create()
        assert r.status_code == 201
        assert r.json()["status"] == "available"
        assert r.json()["quantity"] == 500

    def test_negative_quantity_rejected(self):
        assert self._create(quantity=-1).status_code == 422

    def test_invalid_status_rejected(self):
        assert self._create(status="lost").status_code == 422

    def test_zero_quantity_update_depletes(self):
        rid = self._create().json()["id"]
        r = client.patch(f"/api/v1/resources/{rid}", json={"quantity": 0})
        assert r.json()["status"] == "depleted"
        assert r.json()["quantity"] == 0

    def test_update_status(self):
        rid = self._create().json()["id"]
        r = client.patch(f"/api/v1/resources/{rid}", json={"status": "allocated"})
        assert r.json()["status"] == "allocated"

    def test_list_filters(self):
        self._create()
        self._create(name="Rice", type="food")
        r = client.get("/api/v1/resources", params={"type": "food"})
        assert [x["name"] for x in r.json()] == ["Rice"]

    def test_delete_resource(self):
        rid = self._create().json()["id"]
        r = client.delete(f"/api/v1/resources/{rid}")
        assert r.json() == {"status": "deleted", "id": rid}
        assert client.get(f"/api/v1/resources/{rid}").status_code == 404

    def test_delete_missing_resource(self):
        assert client.delete("/api/v1/resources/nope").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# SKILLS
# ═══════════════════════════════════════════════════════════════════════════
class TestSkills:
    def test_default_catalog_seeded(self):
        r = client.get("/api/v1/skills")
        assert len(r.json()) == len(DEFAULT_SKILLS)

    def test_seed_is_idempotent(self):
        assert get_skill_service().seed_defaults() == 0
        assert len(client.get("/api/v1/skills").json()) == len(DEFAULT_SKILLS)

    def test_filter_by_category(self):
        r = client.get("/api/v1/skills", params={"category": "Medical"})
        assert sorted(s["name"] for s in r.json()) == ["CPR", "First Aid"]

    def test_grouped_by_category(self):
        groups = client.get("/api/v1/skills/categories").json()
        medical = next(g for g in groups if g["category"] == "Medical")
        assert {s["id"] for s in medical["skills"]} == {FIRST_AID, CPR}

    def test_get_skill(self):
        r = client.get(f"/api/v1/skills/{CPR}")
        assert r.json()["name"] == "CPR"

    def test_get_missing_skill(self):
        assert client.get("/api/v1/skills/nope").status_code == 404

    def test_ids_are_stable(self):
        assert skill_id_for("CPR") == CPR


# ═══════════════════════════════════════════════════════════════════════════
# VOLUNTEERS
# ═══════════════════════════════════════════════════════════════════════════
class TestVolunteers:
    def test_register_volunteer(self):
        d = _volunteer(skills=[FIRST_AID])
        assert d["skills"] == [FIRST_AID]
        assert d["experience_level"] == "beginner"
        assert d["contribution_points"] == 0
        assert d["joined_date"]

    def test_unknown_skill_rejected_and_not_stored(self):
        r = client.post("/api/v1/volunteers", json={
            "name": "Ben", "skills": ["not-a-skill"], "location": _location(),
        })
        assert r.status_code == 400
        assert "not-a-skill" in r.json()["detail"]
        assert client.get("/api/v1/volunteers").json() == []

    def test_invalid_experience_rejected(self):
        r = client.post("/api/v1/volunteers", json={
            "name": "Ben", "experience_level": "wizard", "location": _location(),
        })
        assert r.status_code == 422

    def test_list_filters(self):
        _volunteer("Ana Reyes", skills=[FIRST_AID])
        _volunteer("Ben Cruz", skills=[DRIVING], status="inactive")
        names = lambda r: [v["name"] for v in r.json()]
        assert names(client.get("/api/v1/volunteers", params={"status": "inactive"})) == ["Ben Cruz"]
        assert names(client.get("/api/v1/volunteers", params={"skill": FIRST_AID})) == ["Ana Reyes"]

    def test_search_is_case_insensitive(self):
        _volunteer("Ana Reyes", email="ana.r@relief.org")
        _volunteer("Ben Cruz")
        r = client.get("/api/v1/volunteers", params={"search": "ANA.R@"})
        assert [v["name"] for v in r.json()] == ["Ana Reyes"]
        r = client.get("/api/v1/volunteers", params={"search": "cruz"})
        assert [v["name"] for v in r.json()] == ["Ben Cruz"]

    def test_update_volunteer(self):
        vid = _volunteer()["id"]
        r = client.patch(f"/api/v1/volunteers/{vid}", json={
            "skills": [CPR, CPR], "experience_level": "expert",
        })
        assert r.status_code == 200
        assert r.json()["skills"] == [CPR]
        assert r.json()["experience_level"] == "expert"

    def test_update_with_unknown_skill_rejected(self):
        vid = _volunteer()["id"]
        r = client.patch(f"/api/v1/volunteers/{vid}", json={"skills": ["bogus"]})
        assert r.status_code == 400

    def test_delete_volunteer(self):
        vid = _volunteer()["id"]
        assert client.delete(f"/api/v1/volunteers/{vid}").status_code == 200
        assert client.get(f"/api/v1/volunteers/{vid}").status_code == 404

    def test_null_clears_current_task(self):
        vid = _volunteer()["id"]
        client.patch(f"/api/v1/volunteers/{vid}", json={"current_task": "task-7"})
        r = client.patch(f"/api/v1/volunteers/{vid}", json={"current_task": None})
        assert r.status_code == 200
        assert r.json()["current_task"] is None
        assert r.json()["name"] == "Ana Reyes"

    def test_delete_team_member_rejected(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        tid = _team("Alpha", members=[v1, v2], leader=v1).json()["id"]
        r = client.delete(f"/api/v1/volunteers/{v1}")
        assert r.status_code == 409
        assert "Alpha" in r.json()["detail"]
        assert client.get(f"/api/v1/volunteers/{v1}").status_code == 200
        team = client.get(f"/api/v1/teams/{tid}").json()
        assert team["leader_id"] == v1
        assert team["members"] == [v1, v2]

    def test_delete_after_leaving_team(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        tid = _team("Alpha", members=[v1, v2], leader=v1).json()["id"]
        client.delete(f"/api/v1/teams/{tid}/members/{v2}")
        assert client.delete(f"/api/v1/volunteers/{v2}").status_code == 200

    def test_delete_missing_volunteer(self):
        assert client.delete("/api/v1/volunteers/nope").status_code == 404

    def test_check_in_code(self):
        vid = _volunteer("Ana Reyes")["id"]
        r = client.get(f"/api/v1/volunteers/{vid}/check-in")
        d = r.json()
        assert d["payload"]["type"] == "volunteer_check_in"
        assert d["payload"]["volunteer_id"] == vid
        assert d["payload"]["volunteer_name"] == "Ana Reyes"
        assert d["payload"]["task_id"] == "general"
        assert d["qr_code_url"].startswith(settings.QR_CODE_API_URL)
        assert "size=200x200" in d["qr_code_url"]

    def test_check_in_code_for_task(self):
        vid = _volunteer()["id"]
        r = client.get(f"/api/v1/volunteers/{vid}/check-in", params={"task_id": "t-1"})
        assert r.json()["payload"]["task_id"] == "t-1"

    def test_check_in_code_missing_volunteer(self):
        assert client.get("/api/v1/volunteers/nope/check-in").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# TEAMS
# ═══════════════════════════════════════════════════════════════════════════
class TestTeamCoverage:
    def test_two_members_cover_required_skills(self):
        v1 = _volunteer("Ana Reyes", skills=[FIRST_AID])["id"]
        v2 = _volunteer("Ben Cruz", skills=[DRIVING, CPR])["id"]
        r = client.post("/api/v1/teams/coverage", json={
            "required_skills": [FIRST_AID, DRIVING], "member_ids": [v1, v2],
        })
        d = r.json()
        assert d["covered"] == [FIRST_AID, DRIVING]
        assert d["missing"] == []
        assert d["complete"] is True
        assert d["skill_names"][DRIVING] == "Driving"

    def test_uncovered_skill_reported_missing(self):
        v1 = _volunteer(skills=[FIRST_AID])["id"]
        r = client.post("/api/v1/teams/coverage", json={
            "required_skills": [TRANSLATION], "member_ids": [v1],
        })
        assert r.json()["covered"] == []
        assert r.json()["missing"] == [TRANSLATION]
        assert r.json()["complete"] is False

    def test_no_members_misses_everything(self):
        r = client.post("/api/v1/teams/coverage", json={"required_skills": [CPR, DRIVING]})
        assert r.json()["missing"] == [CPR, DRIVING]

    def test_nothing_required(self):
        v1 = _volunteer(skills=[CPR])["id"]
        r = client.post("/api/v1/teams/coverage", json={"member_ids": [v1]})
        assert r.json() == {"covered": [], "missing": [], "complete": True, "skill_names": {}}

    def test_unknown_volunteer(self):
        r = client.post("/api/v1/teams/coverage", json={
            "required_skills": [CPR], "member_ids": ["ghost"],
        })
        assert r.status_code == 404
        assert "ghost" in r.json()["detail"]


class TestTeamCreate:
    def test_create_team(self):
        v1 = _volunteer("Ana Reyes", skills=[FIRST_AID])["id"]
        v2 = _volunteer("Ben Cruz", skills=[DRIVING])["id"]
        r = _team(" Alpha ", members=[v1, v2], leader=v1, skills=[FIRST_AID, TRANSLATION],
                  location="Barangay Hall")
        assert r.status_code == 201
        d = r.json()
        assert d["name"] == "Alpha"
        assert d["active"] is True
        assert d["leader_id"] == v1
        assert d["members"] == [v1, v2]
        assert d["coverage"]["covered"] == [FIRST_AID]
        assert d["coverage"]["missing"] == [TRANSLATION]

    def test_empty_name_rejected_and_not_stored(self):
        v1 = _volunteer()["id"]
        r = _team("", members=[v1], leader=v1)
        assert r.status_code == 400
        assert r.json()["detail"] == "Team name is required"
        assert client.get("/api/v1/teams").json() == []

    def test_missing_leader_rejected(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        r = _team("Alpha", members=[v1, v2])
        assert r.status_code == 400
        assert r.json()["detail"] == "Please designate a team leader"
        assert client.get("/api/v1/teams").json() == []

    def test_no_members_rejected(self):
        r = _team("Alpha")
        assert r.status_code == 400
        assert r.json()["detail"] == "Please select at least one volunteer"

    def test_leader_outside_members_rejected(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        r = _team("Alpha", members=[v1], leader=v2)
        assert r.status_code == 400
        assert r.json()["detail"] == "Team leader must be one of the team members"

    def test_unknown_member_rejected(self):
        r = _team("Alpha", members=["ghost"], leader="ghost")
        assert r.status_code == 404
        assert client.get("/api/v1/teams").json() == []

    def test_unknown_skill_rejected(self):
        v1 = _volunteer()["id"]
        r = _team("Alpha", members=[v1], leader=v1, skills=["bogus"])
        assert r.status_code == 400

    def test_unknown_incident_rejected(self):
        v1 = _volunteer()["id"]
        r = _team("Alpha", members=[v1], leader=v1, incident_id="nope")
        assert r.status_code == 404

    def test_linked_to_incident(self):
        iid = _incident()["id"]
        v1 = _volunteer()["id"]
        _team("Alpha", members=[v1], leader=v1, incident_id=iid)
        _team("Bravo", members=[v1], leader=v1)
        r = client.get("/api/v1/teams", params={"incident_id": iid})
        assert [t["name"] for t in r.json()] == ["Alpha"]

    def test_members_are_notified(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        with patch.object(get_notification_client(), "send", return_value=True) as send:
            _team("Alpha", members=[v1, v2], leader=v1)
        assert send.call_count == 2
        recipients = {c.kwargs["recipient"] for c in send.call_args_list}
        assert recipients == {"ana@relief.org", "ben@relief.org"}

    def test_rejected_team_sends_nothing(self):
        v1 = _volunteer()["id"]
        with patch.object(get_notification_client(), "send") as send:
            _team("Alpha", members=[v1])
        send.assert_not_called()


class TestTeamMembership:
    def _setup(self):
        v1 = _volunteer("Ana Reyes", skills=[FIRST_AID])["id"]
        v2 = _volunteer("Ben Cruz", skills=[DRIVING])["id"]
        tid = _team("Alpha", members=[v1, v2], leader=v1, skills=[FIRST_AID, DRIVING]).json()["id"]
        return tid, v1, v2

    def test_get_team_with_coverage(self):
        tid, _, _ = self._setup()
        r = client.get(f"/api/v1/teams/{tid}")
        assert r.json()["coverage"]["complete"] is True

    def test_get_missing_team(self):
        assert client.get("/api/v1/teams/nope").status_code == 404

    def test_leader_silently_replaced(self):
        tid, v1, v2 = self._setup()
        r = client.put(f"/api/v1/teams/{tid}/leader", json={"volunteer_id": v2})
        assert r.status_code == 200
        assert r.json()["leader_id"] == v2

    def test_leader_must_be_member(self):
        tid, v1, _ = self._setup()
        v3 = _volunteer("Cara Lim")["id"]
        r = client.put(f"/api/v1/teams/{tid}/leader", json={"volunteer_id": v3})
        assert r.status_code == 400
        assert client.get(f"/api/v1/teams/{tid}").json()["leader_id"] == v1

    def test_add_member(self):
        tid, v1, v2 = self._setup()
        v3 = _volunteer("Cara Lim")["id"]
        r = client.post(f"/api/v1/teams/{tid}/members", json={"volunteer_id": v3})
        assert r.json()["members"] == [v1, v2, v3]

    def test_add_existing_member_is_noop(self):
        tid, v1, v2 = self._setup()
        r = client.post(f"/api/v1/teams/{tid}/members", json={"volunteer_id": v2})
        assert r.status_code == 200
        assert r.json()["members"] == [v1, v2]
        assert r.json()["updated_at"] is None

    def test_add_unknown_volunteer(self):
        tid, _, _ = self._setup()
        r = client.post(f"/api/v1/teams/{tid}/members", json={"volunteer_id": "ghost"})
        assert r.status_code == 404

    def test_removing_leader_clears_leader(self):
        tid, v1, v2 = self._setup()
        r = client.delete(f"/api/v1/teams/{tid}/members/{v1}")
        assert r.status_code == 200
        assert r.json()["members"] == [v2]
        assert r.json()["leader_id"] is None
        assert r.json()["coverage"]["missing"] == [FIRST_AID]

    def test_removing_last_member_rejected(self):
        v1 = _volunteer()["id"]
        tid = _team("Solo", members=[v1], leader=v1).json()["id"]
        r = client.delete(f"/api/v1/teams/{tid}/members/{v1}")
        assert r.status_code == 400
        assert client.get(f"/api/v1/teams/{tid}").json()["members"] == [v1]

    def test_removing_non_member(self):
        tid, _, _ = self._setup()
        assert client.delete(f"/api/v1/teams/{tid}/members/ghost").status_code == 404

    def test_update_team(self):
        tid, _, _ = self._setup()
        r = client.patch(f"/api/v1/teams/{tid}", json={
            "description": "Night crew", "required_skills": [TRANSLATION],
        })
        d = r.json()
        assert d["description"] == "Night crew"
        assert d["skills_required"] == [TRANSLATION]
        assert d["coverage"]["missing"] == [TRANSLATION]

    def test_blank_name_rejected(self):
        tid, _, _ = self._setup()
        r = client.patch(f"/api/v1/teams/{tid}", json={"name": "   "})
        assert r.status_code == 400
        assert client.get(f"/api/v1/teams/{tid}").json()["name"] == "Alpha"

    def test_deactivate_and_filter(self):
        tid, v1, _ = self._setup()
        _team("Bravo", members=[v1], leader=v1)
        client.patch(f"/api/v1/teams/{tid}", json={"active": False})
        active = client.get("/api/v1/teams", params={"active": True}).json()
        assert [t["name"] for t in active] == ["Bravo"]

    def test_null_clears_description_and_location(self):
        tid, _, _ = self._setup()
        client.patch(f"/api/v1/teams/{tid}", json={"description": "Night crew", "location": "Gym"})
        r = client.patch(f"/api/v1/teams/{tid}", json={"description": None, "location": None})
        assert r.status_code == 200
        assert r.json()["description"] is None
        assert r.json()["location"] is None
        assert r.json()["name"] == "Alpha"

    def test_null_name_is_ignored(self):
        tid, _, _ = self._setup()
        r = client.patch(f"/api/v1/teams/{tid}", json={"name": None})
        assert r.status_code == 200
        assert r.json()["name"] == "Alpha"

    def test_toggle_skill_on_and_off(self):
        tid, _, _ = self._setup()
        r = client.post(f"/api/v1/teams/{tid}/skills/{TRANSLATION}/toggle")
        assert r.status_code == 200
        assert r.json()["skills_required"] == [FIRST_AID, DRIVING, TRANSLATION]
        assert r.json()["coverage"]["missing"] == [TRANSLATION]
        r = client.post(f"/api/v1/teams/{tid}/skills/{DRIVING}/toggle")
        assert r.json()["skills_required"] == [FIRST_AID, TRANSLATION]
        assert client.get(f"/api/v1/teams/{tid}").json()["skills_required"] == [FIRST_AID, TRANSLATION]

    def test_toggle_unknown_skill_rejected(self):
        tid, _, _ = self._setup()
        r = client.post(f"/api/v1/teams/{tid}/skills/bogus/toggle")
        assert r.status_code == 400
        assert client.get(f"/api/v1/teams/{tid}").json()["skills_required"] == [FIRST_AID, DRIVING]

    def test_toggle_on_missing_team(self):
        assert client.post(f"/api/v1/teams/nope/skills/{CPR}/toggle").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# TASKS & SHIFTS
# ═══════════════════════════════════════════════════════════════════════════
class TestTasks:
    def test_create_task(self):
        d = _task(skills_required=[FIRST_AID], estimated_duration=90)
        assert d["status"] == "open"
        assert d["skills_required"] == [FIRST_AID]

    def test_unknown_skill_rejected(self):
        r = client.post("/api/v1/tasks", json={"title": "X", "skills_required": ["bogus"]})
        assert r.status_code == 400

    def test_unknown_incident_rejected(self):
        r = client.post("/api/v1/tasks", json={"title": "X", "incident_id": "nope"})
        assert r.status_code == 404

    def test_status_update_and_filter(self):
        tid = _task()["id"]
        _task(title="Other")
        r = client.patch(f"/api/v1/tasks/{tid}", json={"status": "in_progress"})
        assert r.json()["status"] == "in_progress"
        r = client.get("/api/v1/tasks", params={"status": "open"})
        assert [t["title"] for t in r.json()] == ["Other"]

    def test_get_missing_task(self):
        assert client.get("/api/v1/tasks/nope").status_code == 404


class TestShiftScheduling:
    def test_schedule_named_slot(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        r = _shift(vid, tid, "morning")
        assert r.status_code == 201
        d = r.json()
        assert d["status"] == "scheduled"
        assert d["start_time"].startswith(f"{NEXT_WEEK.isoformat()}T08:00")
        assert d["end_time"].startswith(f"{NEXT_WEEK.isoformat()}T12:00")

    def test_schedule_explicit_times(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        start = datetime.now(timezone.utc) + timedelta(days=2)
        r = client.post("/api/v1/shifts", json={
            "volunteer_id": vid, "task_id": tid,
            "start_time": start.isoformat(), "end_time": (start + timedelta(hours=3)).isoformat(),
        })
        assert r.status_code == 201

    def test_back_to_back_shifts_allowed(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        assert _shift(vid, tid, "morning").status_code == 201
        assert _shift(vid, tid, "afternoon").status_code == 201

    def test_overlap_rejected(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        _shift(vid, tid, "morning")
        start = datetime.combine(NEXT_WEEK, datetime.min.time(), tzinfo=timezone.utc) + timedelta(hours=11)
        r = client.post("/api/v1/shifts", json={
            "volunteer_id": vid, "task_id": tid,
            "start_time": start.isoformat(), "end_time": (start + timedelta(hours=2)).isoformat(),
        })
        assert r.status_code == 409

    def test_cancelled_shift_frees_slot(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        sid = _shift(vid, tid, "morning").json()["id"]
        client.post(f"/api/v1/shifts/{sid}/cancel")
        assert _shift(vid, tid, "morning").status_code == 201

    def test_other_volunteers_do_not_conflict(self):
        v1 = _volunteer("Ana Reyes")["id"]
        v2 = _volunteer("Ben Cruz")["id"]
        tid = _task()["id"]
        assert _shift(v1, tid).status_code == 201
        assert _shift(v2, tid).status_code == 201

    def test_end_before_start_rejected(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        start = datetime.now(timezone.utc) + timedelta(days=1)
        r = client.post("/api/v1/shifts", json={
            "volunteer_id": vid, "task_id": tid,
            "start_time": start.isoformat(), "end_time": start.isoformat(),
        })
        assert r.status_code == 400

    def test_missing_window_rejected(self):
        r = client.post("/api/v1/shifts", json={"volunteer_id": "v", "task_id": "t"})
        assert r.status_code == 422

    def test_unknown_slot_rejected(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        assert _shift(vid, tid, "midnight").status_code == 400

    def test_task_must_be_open(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        client.patch(f"/api/v1/tasks/{tid}", json={"status": "completed"})
        assert _shift(vid, tid).status_code == 400

    def test_unknown_volunteer_or_task(self):
        tid = _task()["id"]
        vid = _volunteer()["id"]
        assert _shift("ghost", tid).status_code == 404
        assert _shift(vid, "ghost").status_code == 404


class TestShiftLifecycle:
    def _booked(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        return vid, tid, _shift(vid, tid, "morning").json()["id"]

    def test_check_in_and_out_awards_points(self):
        vid, _, sid = self._booked()
        r = client.post(f"/api/v1/shifts/{sid}/check-in")
        assert r.json()["status"] == "checked_in"
        assert r.json()["check_in_time"]
        r = client.post(f"/api/v1/shifts/{sid}/check-out")
        assert r.json()["status"] == "completed"
        assert r.json()["check_out_time"]
        assert client.get(f"/api/v1/volunteers/{vid}").json()["contribution_points"] == 4

    def test_check_out_before_check_in_rejected(self):
        _, _, sid = self._booked()
        assert client.post(f"/api/v1/shifts/{sid}/check-out").status_code == 409

    def test_completed_shift_cannot_be_cancelled(self):
        _, _, sid = self._booked()
        client.post(f"/api/v1/shifts/{sid}/check-in")
        client.post(f"/api/v1/shifts/{sid}/check-out")
        r = client.post(f"/api/v1/shifts/{sid}/cancel")
        assert r.status_code == 409
        assert "terminal" in r.json()["detail"]

    def test_missing_shift(self):
        assert client.post("/api/v1/shifts/nope/check-in").status_code == 404
        assert client.get("/api/v1/shifts/nope").status_code == 404

    def test_list_by_status(self):
        _, tid, sid = self._booked()
        client.post(f"/api/v1/shifts/{sid}/cancel")
        r = client.get("/api/v1/shifts", params={"task_id": tid, "status": "cancelled"})
        assert [s["id"] for s in r.json()] == [sid]

    def test_upcoming_shifts(self):
        vid, tid, sid = self._booked()
        later = _shift(vid, tid, "evening").json()["id"]
        cancelled = _shift(vid, tid, "afternoon").json()["id"]
        client.post(f"/api/v1/shifts/{cancelled}/cancel")
        r = client.get(f"/api/v1/volunteers/{vid}/shifts/upcoming")
        d = r.json()
        assert [s["id"] for s in d] == [sid, later]
        assert d[0]["task"]["title"] == "Sandbag the levee"
        assert d[0]["task"]["priority"] == "high"

    def test_upcoming_excludes_past(self):
        vid = _volunteer()["id"]
        tid = _task()["id"]
        _shift(vid, tid, day=(datetime.now(timezone.utc) - timedelta(days=3)).date())
        assert client.get(f"/api/v1/volunteers/{vid}/shifts/upcoming").json() == []

    def test_upcoming_limit(self):
        vid, tid, _ = self._booked()
        _shift(vid, tid, "afternoon")
        r = client.get(f"/api/v1/volunteers/{vid}/shifts/upcoming", params={"limit": 1})
        assert len(r.json()) == 1

    def test_slot_availability(self):
        vid, _, _ = self._booked()
        r = client.get("/api/v1/shifts/availability", params={
            "volunteer_id": vid, "date": NEXT_WEEK.isoformat(),
        })
        slots = {s["id"]: s["available"] for s in r.json()}
        assert slots == {"morning": False, "afternoon": True, "evening": True}

    def test_availability_unknown_volunteer(self):
        r = client.get("/api/v1/shifts/availability", params={
            "volunteer_id": "ghost", "date": NEXT_WEEK.isoformat(),
        })
        assert r.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════
class TestDashboard:
    def test_stats(self):
        _incident(title="A")
        resolved = _incident(title="B")["id"]
        client.post(f"/api/v1/incidents/{resolved}/resolve")
        v1 = _volunteer("Ana Reyes")["id"]
        _volunteer("Ben Cruz", status="inactive")
        client.post("/api/v1/resources", json={
            "name": "Tents", "type": "shelter", "quantity": 20, "location": _location(),
        })
        _team("Alpha", members=[v1], leader=v1)
        assert client.get("/api/v1/dashboard/stats").json() == {
            "active_incidents": 1,
            "resolved_incidents": 1,
            "active_volunteers": 1,
            "available_resources": 1,
            "active_teams": 1,
        }

    def test_empty_stats(self):
        d = client.get("/api/v1/dashboard/stats").json()
        assert all(v == 0 for v in d.values())

    def test_recent_incidents(self):
        for n in range(7):
            _incident(title=f"Incident {n}")
        r = client.get("/api/v1/dashboard/recent-incidents")
        assert len(r.json()) == settings.RECENT_INCIDENTS_LIMIT
        assert r.json()[0]["title"] == "Incident 6"


# ═══════════════════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════
class TestNotificationClient:
    def test_disabled_without_url(self):
        notifier = NotificationClient(base_url="")
        assert notifier.enabled is False
        with patch("httpx.Client.post") as post:
            assert notifier.send("mock", "ana@relief.org", "hi") is False
        post.assert_not_called()

    def test_send_success(self):
        notifier = NotificationClient(base_url="http://notify:8004")
        resp = httpx.Response(200, request=httpx.Request("POST", "http://notify:8004/api/v1/notify"))
        with patch("httpx.Client.post", return_value=resp) as post:
            assert notifier.send("mock", "ana@relief.org", "hi", reference="inc-1") is True
        assert post.call_args.args[0] == "http://notify:8004/api/v1/notify"
        assert post.call_args.kwargs["json"]["incident_id"] == "inc-1"

    def test_failure_is_swallowed(self):
        notifier = NotificationClient(base_url="http://notify:8004")
        with patch("httpx.Client.post", side_effect=httpx.ConnectError("refused")):
            assert notifier.send("mock", "ana@relief.org", "hi") is False

    def test_error_status_is_failure(self):
        notifier = NotificationClient(base_url="http://notify:8004")
        resp = httpx.Response(500, request=httpx.Request("POST", "http://notify:8004/api/v1/notify"))
        with patch("httpx.Client.post", return_value=resp):
            assert notifier.send("mock", "ana@relief.org", "hi") is False


# ═══════════════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════════════
class TestJSONLogging:
    def _format(self, **extra):
        record = logging.LogRecord("reliefconnect.test", logging.INFO, __file__, 1,
                                   "Team created id=%s", ("t-1",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        RequestContextFilter().filter(record)
        return json.loads(JSONFormatter().format(record))

    def test_basic_fields(self):
        entry = self._format()
        assert entry["level"] == "INFO"
        assert entry["message"] == "Team created id=t-1"
        assert entry["service"] == settings.SERVICE_NAME
        assert "request_id" not in entry

    def test_context_fields_promoted(self):
        entry = self._format(team_id="t-1", volunteer_id="v-1")
        assert entry["team_id"] == "t-1"
        assert entry["volunteer_id"] == "v-1"
        assert "shift_id" not in entry

    def test_request_id_from_context(self):
        token = request_id_var.set("req-7")
        try:
            entry = self._format()
        finally:
            request_id_var.reset(token)
        assert entry["request_id"] == "req-7"
