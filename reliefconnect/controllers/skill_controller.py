# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Skill catalog lookups."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from reliefconnect.core.dependencies import get_skill_service
from reliefconnect.schemas import SkillCategory, SkillOut
from reliefconnect.services.skill_service import SkillService

router = APIRouter(prefix="/api/v1", tags=["Skills"])


@router.get("/skills", response_model=List[SkillOut])
def list_skills(category: Optional[str] = None,
                service: SkillService = Depends(get_skill_service)):
    return service.list_skills(category)


@router.get("/skills/categories", response_model=List[SkillCategory])
def list_skill_categories(service: SkillService = Depends(get_skill_service)):
    return service.list_by_category()


@router.get("/skills/{skill_id}", response_model=SkillOut)
def get_skill(skill_id: str, service: SkillService = Depends(get_skill_service)):
    try:
        return service.get_skill(skill_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Skill not found")
