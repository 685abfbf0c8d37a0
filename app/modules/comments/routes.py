from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.comments.schemas import (
    CommentCreate, CommentUpdate, CommentResponse, CommentsPage, AdminCommentsPage,
    CommentStatusUpdate, BulkCommentStatusUpdate, CommentStats
)
from app.modules.comments.service import CommentService
from app.core.dependencies import get_current_user_id, require_admin, is_admin, get_access_cache
from supabase import Client
from typing import Optional, Dict, Literal

router = APIRouter(prefix="/comments", tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_service_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/posts/{post_id}", response_model=CommentsPage)
async def get_post_comments(
    post_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: CommentService = Depends(get_comment_service)
):
    """Approved comment threads of a post"""
    return service.get_post_comments(post_id, limit, offset)


@router.get("/posts/{post_id}/count")
async def get_comment_count(post_id: str, service: CommentService = Depends(get_comment_service)):
    return {"count": service.get_comment_count(post_id)}


@router.post("", response_model=CommentResponse, status_code=201)
async def create_comment(
    comment: CommentCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_service_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Comment or reply; non-admin comments wait for moderation"""
    return service.create_comment(
        comment.post_id,
        comment.body,
        user_data["id"],
        parent_id=comment.parent_id,
        auto_approve=is_admin(user_data, supabase, cache),
    )


@router.get("/admin", response_model=AdminCommentsPage)
async def get_admin_comments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Literal["all", "pending", "approved", "spam"] = "all",
    post_id: Optional[str] = None,
    user_data: Dict = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    return service.get_admin_comments(page, limit, status, post_id)


@router.get("/admin/stats", response_model=CommentStats)
async def get_comment_stats(
    user_data: Dict = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    return service.get_comment_stats()


@router.put("/admin/bulk-status")
async def bulk_update_comment_status(
    request: BulkCommentStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    return {"updated": service.bulk_update_comment_status(request.ids, request.status)}


@router.put("/admin/{comment_id}/status", response_model=CommentResponse)
async def update_comment_status(
    comment_id: str,
    request: CommentStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    return service.update_comment_status(comment_id, request.status)


@router.delete("/admin/{comment_id}", status_code=204)
async def admin_delete_comment(
    comment_id: str,
    user_data: Dict = Depends(require_admin),
    service: CommentService = Depends(get_comment_service)
):
    service.admin_delete_comment(comment_id)
    return None


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    update: CommentUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service)
):
    """Edit your own comment"""
    return service.update_comment(comment_id, update.body, user_data["id"])


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_service_supabase),
    cache: Dict = Depends(get_access_cache)
):
    service.delete_comment(comment_id, user_data["id"], viewer_is_admin=is_admin(user_data, supabase, cache))
    return None
