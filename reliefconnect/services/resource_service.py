# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for relief resource tracking."""
import uuid
from typing import Any, Dict, List

from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import RESOURCES_CREATED
from reliefconnect.repositories.resource_repository import ResourceRepository

logger = get_logger(__name__)


class ResourceService:
    def __init__(self, repo: ResourceRepository):
        self._repo = repo

    def create_resource(self, name: str, resource_type: str, quantity: int,
                        status: str, location: Dict[str, Any]) -> Dict[str, Any]:
        resource_id = str(uuid.uuid4())
        result = self._repo.create_resource(
            resource_id, name, resource_type, quantity, status, location,
        )
        RESOURCES_CREATED.labels(type=resource_type).inc()
        logger.info("Resource added id=%s type=%s quantity=%d", resource_id, resource_type, quantity)
        return result

    def get_resource(self, resource_id: str) -> Dict[str, Any]:
        resource = self._repo.get_resource(resource_id)
        if resource is None:
            raise KeyError(f"Resource {resource_id} not found")
        return resource

    def update_resource(self, resource_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        current = self.get_resource(resource_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes.get("quantity") == 0:
            changes["status"] = "depleted"
        if not changes:
            return current
        logger.info("Resource updated id=%s fields=%s", resource_id, sorted(changes))
        return self._repo.update_resource(resource_id, changes)

    def delete_resource(self, resource_id: str) -> Dict[str, str]:
        if not self._repo.delete_resource(resource_id):
            raise KeyError(f"Resource {resource_id} not found")
        logger.info("Resource deleted id=%s", resource_id)
        return {"status": "deleted", "id": resource_id}

    def list_resources(self, resource_type=None, status=None) -> List[Dict[str, Any]]:
        return self._repo.list_resources(resource_type, status)

    def count_by_status(self, status: str) -> int:
        return self._repo.count_by_status(status)
