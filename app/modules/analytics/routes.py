from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.analytics.schemas import LeaderboardResponse, GroupAnalyticsResponse, DashboardResponse
from app.modules.analytics.service import AnalyticsService
from app.core.dependencies import authorize, require_permission, get_current_user_id
from supabase import Client
from typing import Dict, Optional

router = APIRouter(tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/analytics/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    search: Optional[str] = None,
    limit: int = 5,
    current_user: Dict = Depends(require_permission("analytics:leaderboard")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.leaderboard(search=search, limit=limit)


@router.get("/analytics/dashboard", response_model=DashboardResponse)
async def dashboard(
    period: str = "all-time",
    current_user: Dict = Depends(require_permission("analytics:dashboard")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Admin dashboard counters"""
    return service.dashboard(period=period)


@router.get("/groups/{group_id}/analytics", response_model=GroupAnalyticsResponse)
async def group_analytics(
    group_id: str,
    period: str = "all-time",
    current_user: Dict = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
    supabase: Client = Depends(get_supabase)
):
    """period: all-time | year | month | week | today"""
    authorize("analytics:group", current_user, supabase, group_id)
    return service.group_analytics(group_id, period=period)
