from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.posts.schemas import (
    PostCreate, PostUpdate, PostResponse, PostsPage, BulkPostStatusUpdate, PostStats
)
from app.modules.posts.service import PostService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Optional, Dict, Literal

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(supabase: Client = Depends(get_service_supabase)) -> PostService:
    return PostService(supabase)


@router.get("", response_model=PostsPage)
async def get_published_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    featured: bool = False,
    service: PostService = Depends(get_post_service)
):
    """Published posts, optionally filtered by category slug, tag or featured flag"""
    return service.get_published_posts(page, limit, category, tag, featured)


@router.get("/featured", response_model=List[PostResponse])
async def get_featured_posts(
    limit: int = Query(5, ge=1, le=50),
    service: PostService = Depends(get_post_service)
):
    return service.get_featured_posts(limit)


@router.get("/recent", response_model=List[PostResponse])
async def get_recent_posts(
    limit: int = Query(5, ge=1, le=50),
    service: PostService = Depends(get_post_service)
):
    return service.get_recent_posts(limit)


@router.get("/admin", response_model=PostsPage)
async def get_admin_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Literal["all", "draft", "scheduled", "published", "archived"] = "all",
    search: Optional[str] = None,
    sort_by: Literal["created_at", "updated_at", "published_at", "title", "view_count"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    return service.get_admin_posts(page, limit, status, search, sort_by, sort_order)


@router.get("/admin/stats", response_model=PostStats)
async def get_post_stats(
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    return service.get_post_stats()


@router.post("/admin", response_model=PostResponse, status_code=201)
async def create_post(
    post: PostCreate,
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    return service.create_post(post, user_data["id"])


@router.put("/admin/bulk-status")
async def bulk_update_post_status(
    request: BulkPostStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    """Set the status of several posts at once"""
    return {"updated": service.bulk_update_post_status(request.ids, request.status)}


@router.get("/admin/{post_id}", response_model=PostResponse)
async def get_admin_post(
    post_id: str,
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    return service.get_admin_post(post_id)


@router.put("/admin/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    update: PostUpdate,
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    return service.update_post(post_id, update)


@router.delete("/admin/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    user_data: Dict = Depends(require_admin),
    service: PostService = Depends(get_post_service)
):
    service.delete_post(post_id)
    return None


@router.get("/{slug}", response_model=PostResponse)
async def get_post_by_slug(slug: str, service: PostService = Depends(get_post_service)):
    return service.get_post_by_slug(slug)


@router.post("/{post_id}/view")
async def increment_view_count(post_id: str, service: PostService = Depends(get_post_service)):
    service.increment_view_count(post_id)
    return {"success": True}
