from fastapi import APIRouter, Depends, Query

from apps.dashboard.service import DashboardService
from apps.dependencies import get_dashboard_service
from common.responses import success_response


router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("")
async def dashboard_stats(
    recientes: int = Query(5, ge=0, le=50),
    service: DashboardService = Depends(get_dashboard_service),
):
    stats = await service.stats(recent_limit=recientes)
    return success_response(stats.model_dump(mode="json"))
