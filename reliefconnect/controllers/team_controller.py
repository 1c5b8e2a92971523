# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Team builder. Skill coverage, creation, leadership and membership."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from reliefconnect.core.dependencies import get_team_service
from reliefconnect.schemas import (
    CoverageOut, CoverageRequest, LeaderAssign, MemberAdd,
    TeamCreate, TeamOut, TeamUpdate,
)
from reliefconnect.services.team_service import TeamService

router = APIRouter(prefix="/api/v1", tags=["Teams"])


@router.post("/teams/coverage", response_model=CoverageOut)
def evaluate_coverage(body: CoverageRequest,
                      service: TeamService = Depends(get_team_service)):
    """Which required skills the selected volunteers cover. Nothing is stored."""
    try:
        return service.evaluate_coverage(body.required_skills, body.member_ids)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])


@router.post("/teams", status_code=201, response_model=TeamOut)
def create_team(body: TeamCreate, service: TeamService = Depends(get_team_service)):
    try:
        return service.create_team(
            name=body.name,
            member_ids=body.member_ids,
            leader_id=body.leader_id,
            required_skills=body.required_skills,
            description=body.description,
            incident_id=body.incident_id,
            location=body.location,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/teams", response_model=List[TeamOut])
def list_teams(active: Optional[bool] = None, incident_id: Optional[str] = None,
               service: TeamService = Depends(get_team_service)):
    return service.list_teams(active, incident_id)


@router.get("/teams/{team_id}", response_model=TeamOut)
def get_team(team_id: str, service: TeamService = Depends(get_team_service)):
    try:
        return service.get_team(team_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Team not found")


@router.patch("/teams/{team_id}", response_model=TeamOut)
def update_team(team_id: str, body: TeamUpdate,
                service: TeamService = Depends(get_team_service)):
    try:
        return service.update_team(team_id, body.model_dump(exclude_unset=True))
    except KeyError:
        raise HTTPException(status_code=404, detail="Team not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/teams/{team_id}/leader", response_model=TeamOut)
def assign_leader(team_id: str, body: LeaderAssign,
                  service: TeamService = Depends(get_team_service)):
    try:
        return service.assign_leader(team_id, body.volunteer_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Team not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/teams/{team_id}/members", response_model=TeamOut)
def add_member(team_id: str, body: MemberAdd,
               service: TeamService = Depends(get_team_service)):
    try:
        return service.add_member(team_id, body.volunteer_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])


@router.delete("/teams/{team_id}/members/{volunteer_id}", response_model=TeamOut)
def remove_member(team_id: str, volunteer_id: str,
                  service: TeamService = Depends(get_team_service)):
    try:
        return service.remove_member(team_id, volunteer_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/teams/{team_id}/skills/{skill_id}/toggle", response_model=TeamOut)
def toggle_required_skill(team_id: str, skill_id: str,
                          service: TeamService = Depends(get_team_service)):
    try:
        return service.toggle_skill(team_id, skill_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Team not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
