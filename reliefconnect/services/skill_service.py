# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Service: Skill catalog seeding and lookups."""
import uuid
from typing import Any, Dict, Iterable, List

from reliefconnect.core.logging import get_logger
from reliefconnect.repositories.skill_repository import SkillRepository

logger = get_logger(__name__)

SKILL_NAMESPACE = uuid.UUID("6f1c2a52-6d0e-4c55-9d7e-2f4d1c0b7a10")

DEFAULT_SKILLS: List[Dict[str, str]] = [
    {"name": "First Aid", "category": "Medical",
     "description": "Basic first aid knowledge and skills", "icon": "heart"},
    {"name": "CPR", "category": "Medical",
     "description": "Cardiopulmonary resuscitation certification", "icon": "activity"},
    {"name": "Search and Rescue", "category": "Emergency",
     "description": "Training in search and rescue operations", "icon": "search"},
    {"name": "Disaster Assessment", "category": "Emergency",
     "description": "Ability to assess disaster impact and needs", "icon": "clipboard"},
    {"name": "Food Preparation", "category": "Logistics",
     "description": "Experience in mass food preparation", "icon": "chef-hat"},
    {"name": "Shelter Management", "category": "Logistics",
     "description": "Experience managing emergency shelters", "icon": "home"},
    {"name": "Translation", "category": "Communication",
     "description": "Ability to translate between languages", "icon": "message-square"},
    {"name": "Counseling", "category": "Support",
     "description": "Crisis counseling and emotional support", "icon": "life-buoy"},
    {"name": "Childcare", "category": "Support",
     "description": "Experience in childcare services", "icon": "users"},
    {"name": "Driving", "category": "Logistics",
     "description": "Licensed to drive various vehicles", "icon": "truck"},
    {"name": "Ham Radio Operation", "category": "Communication",
     "description": "Licensed ham radio operator", "icon": "radio"},
    {"name": "Drone Operation", "category": "Technology",
     "description": "Licensed drone operator for surveys", "icon": "send"},
    {"name": "Data Entry", "category": "Administration",
     "description": "Quick and accurate data entry skills", "icon": "database"},
    {"name": "Team Leadership", "category": "Management",
     "description": "Experience leading teams in crisis", "icon": "users"},
    {"name": "Animal Care", "category": "Support",
     "description": "Experience in animal rescue and care", "icon": "github"},
]


def skill_id_for(name: str) -> str:
    """Stable id for a seeded skill, identical across deployments."""
    return str(uuid.uuid5(SKILL_NAMESPACE, name))


class SkillService:
    def __init__(self, repo: SkillRepository):
        self._repo = repo

    def seed_defaults(self) -> int:
        """Insert the default catalog into an empty table; returns rows added."""
        if self._repo.count() > 0:
            logger.info("Skill catalog already populated, skipping seed")
            return 0
        added = self._repo.insert_many(
            [{"id": skill_id_for(s["name"]), **s} for s in DEFAULT_SKILLS]
        )
        logger.info("Seeded %d default skills", added)
        return added

    def list_skills(self, category=None) -> List[Dict[str, Any]]:
        return self._repo.list_skills(category)

    def get_skill(self, skill_id: str) -> Dict[str, Any]:
        skill = self._repo.get_skill(skill_id)
        if skill is None:
            raise KeyError(f"Skill {skill_id} not found")
        return skill

    def list_by_category(self) -> List[Dict[str, Any]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for skill in self._repo.list_skills():
            grouped.setdefault(skill["category"], []).append(skill)
        return [{"category": c, "skills": s} for c, s in sorted(grouped.items())]

    def names_for(self, skill_ids: Iterable[str]) -> Dict[str, str]:
        wanted = set(skill_ids)
        return {s["id"]: s["name"] for s in self._repo.list_skills() if s["id"] in wanted}

    def ensure_known(self, skill_ids: Iterable[str]) -> None:
        """Raise ValueError naming any id that is not in the catalog."""
        unknown = self._repo.find_missing(skill_ids)
        if unknown:
            raise ValueError(f"Unknown skill ids: {', '.join(unknown)}")
