# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Coordinator dashboard."""
from typing import List

from fastapi import APIRouter, Depends, Query

from reliefconnect.core.config import settings
from reliefconnect.core.dependencies import get_dashboard_service
from reliefconnect.schemas import DashboardStats, IncidentOut
from reliefconnect.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/v1", tags=["Dashboard"])


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    return service.get_stats()


@router.get("/dashboard/recent-incidents", response_model=List[IncidentOut])
def recent_incidents(
    limit: int = Query(default=settings.RECENT_INCIDENTS_LIMIT, ge=1, le=50),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.recent_incidents(limit)
