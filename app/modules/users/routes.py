from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.users.schemas import (
    UsersPage, UserDetails, UserRoleUpdate, UserOverviewStats, PendingDeletion, UserRole
)
from app.modules.users.service import UserService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Optional, Dict, Literal

router = APIRouter(prefix="/admin/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_service_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=UsersPage)
async def get_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    sort_by: Literal["created_at", "display_name", "activity_count"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """List users with search, role filter and sorting"""
    return service.get_users(page, page_size, search, role, sort_by, sort_order)


@router.get("/stats", response_model=UserOverviewStats)
async def get_user_overview_stats(
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_overview_stats()


@router.get("/pending-deletions", response_model=List[PendingDeletion])
async def get_pending_deletions(
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return service.get_pending_deletions()


@router.get("/{user_id}", response_model=UserDetails)
async def get_user_details(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_details(user_id)


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: str,
    request: UserRoleUpdate,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Change a user's role (not your own)"""
    service.update_user_role(user_id, request.role, user_data["id"])
    return {"success": True}


@router.post("/{user_id}/restore")
async def restore_account(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Cancel a pending account deletion"""
    service.restore_account(user_id)
    return {"success": True}
