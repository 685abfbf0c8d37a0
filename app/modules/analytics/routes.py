from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.analytics.schemas import (
    OverviewStats, GrowthDataPoint, TypeDistribution, StatusDistribution,
    RoleDistribution, TopCreator, TopActivity
)
from app.modules.analytics.service import AnalyticsService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_service_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/overview", response_model=OverviewStats)
async def get_overview_stats(
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_overview_stats()


@router.get("/user-growth", response_model=List[GrowthDataPoint])
async def get_user_growth(
    days: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """New users per day, oldest first"""
    return service.get_user_growth(days)


@router.get("/activity-growth", response_model=List[GrowthDataPoint])
async def get_activity_growth(
    days: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_activity_growth(days)


@router.get("/activity-types", response_model=List[TypeDistribution])
async def get_activity_type_distribution(
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_activity_type_distribution()


@router.get("/activity-statuses", response_model=List[StatusDistribution])
async def get_activity_status_distribution(
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_activity_status_distribution()


@router.get("/user-roles", response_model=List[RoleDistribution])
async def get_user_role_distribution(
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_user_role_distribution()


@router.get("/top-creators", response_model=List[TopCreator])
async def get_top_creators(
    limit: int = Query(10, ge=1, le=100),
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_top_creators(limit)


@router.get("/top-activities", response_model=List[TopActivity])
async def get_top_activities(
    limit: int = Query(10, ge=1, le=100),
    user_data: Dict = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_top_activities(limit)
