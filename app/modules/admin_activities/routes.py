from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.admin_activities.schemas import (
    AdminActivitiesPage, AdminActivityStats, ActivityStatusUpdate, ActivityStatus
)
from app.modules.admin_activities.service import AdminActivityService
from app.core.dependencies import require_admin
from supabase import Client
from typing import Optional, Dict, Literal

router = APIRouter(prefix="/admin/activities", tags=["admin-activities"])


def get_admin_activity_service(supabase: Client = Depends(get_service_supabase)) -> AdminActivityService:
    return AdminActivityService(supabase)


@router.get("", response_model=AdminActivitiesPage)
async def get_admin_activities(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[ActivityStatus] = None,
    type: Optional[Literal["quiz", "quest", "lesson", "flashcard", "roleplay"]] = None,
    sort_by: Literal["created_at", "title", "play_count"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    user_data: Dict = Depends(require_admin),
    service: AdminActivityService = Depends(get_admin_activity_service)
):
    return service.get_admin_activities(page, page_size, search, status, type, sort_by, sort_order)


@router.get("/stats", response_model=AdminActivityStats)
async def get_admin_activity_stats(
    user_data: Dict = Depends(require_admin),
    service: AdminActivityService = Depends(get_admin_activity_service)
):
    return service.get_admin_activity_stats()


@router.put("/{activity_id}/status")
async def update_activity_status(
    activity_id: str,
    request: ActivityStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: AdminActivityService = Depends(get_admin_activity_service)
):
    service.update_activity_status(activity_id, request.status)
    return {"success": True}


@router.delete("/{activity_id}", status_code=204)
async def delete_activity_admin(
    activity_id: str,
    user_data: Dict = Depends(require_admin),
    service: AdminActivityService = Depends(get_admin_activity_service)
):
    service.delete_activity_admin(activity_id)
    return None
