import logging
from supabase import Client
from app.core.utils import (
    generate_slug, timestamped_slug, page_range, total_pages, utc_now_iso, ilike_filter,
    POST_SLUG_MAX_LENGTH
)
from app.modules.posts.models import POST_SELECT
from app.modules.posts.schemas import PostCreate, PostUpdate, PostResponse, PostsPage, PostStats
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _published_query(self, count: Optional[str] = None):
        return self.supabase.table("posts")\
            .select(POST_SELECT, count=count)\
            .eq("status", "published")\
            .lte("published_at", utc_now_iso())

    def get_published_posts(
        self,
        page: int = 1,
        limit: int = 10,
        category_slug: Optional[str] = None,
        tag: Optional[str] = None,
        featured: bool = False
    ) -> PostsPage:
        """Published posts, pinned first then newest"""
        try:
            query = self._published_query(count="exact")
            if category_slug:
                category = self.supabase.table("categories")\
                    .select("id")\
                    .eq("slug", category_slug)\
                    .limit(1)\
                    .execute()
                if not category.data:
                    return PostsPage(posts=[], total=0, page=page, total_pages=0)
                query = query.eq("category_id", category.data[0]["id"])
            if tag:
                query = query.contains("tags", [tag])
            if featured:
                query = query.eq("featured", True)

            start, end = page_range(page, limit)
            result = query\
                .order("pinned", desc=True)\
                .order("published_at", desc=True)\
                .range(start, end)\
                .execute()
            total = result.count or 0
            return PostsPage(
                posts=[PostResponse(**row) for row in (result.data or [])],
                total=total,
                page=page,
                total_pages=total_pages(total, limit),
            )
        except Exception as e:
            logger.error(f"Failed to fetch posts: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch posts: {str(e)}")

    def get_post_by_slug(self, slug: str) -> PostResponse:
        try:
            result = self._published_query()\
                .eq("slug", slug)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch post: {str(e)}")

    def increment_view_count(self, post_id: str) -> None:
        try:
            self.supabase.rpc("increment_post_view_count", {"post_id": post_id}).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to increment view count: {str(e)}")

    def get_featured_posts(self, limit: int = 5) -> List[PostResponse]:
        try:
            result = self._published_query()\
                .eq("featured", True)\
                .order("published_at", desc=True)\
                .limit(limit)\
                .execute()
            return [PostResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch featured posts: {str(e)}")

    def get_recent_posts(self, limit: int = 5) -> List[PostResponse]:
        try:
            result = self._published_query()\
                .order("published_at", desc=True)\
                .limit(limit)\
                .execute()
            return [PostResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch recent posts: {str(e)}")

    # ============================================
    # Admin
    # ============================================

    def get_admin_posts(
        self,
        page: int = 1,
        limit: int = 20,
        status: str = "all",
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc"
    ) -> PostsPage:
        """Posts of any status, filtered and sorted for the back-office table"""
        try:
            query = self.supabase.table("posts").select(POST_SELECT, count="exact")
            if status and status != "all":
                query = query.eq("status", status)
            if search:
                query = query.or_(ilike_filter(["title", "excerpt"], search))

            start, end = page_range(page, limit)
            result = query\
                .order(sort_by, desc=sort_order != "asc")\
                .range(start, end)\
                .execute()
            total = result.count or 0
            return PostsPage(
                posts=[PostResponse(**row) for row in (result.data or [])],
                total=total,
                page=page,
                total_pages=total_pages(total, limit),
            )
        except Exception as e:
            logger.error(f"Failed to fetch admin posts: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch posts: {str(e)}")

    def get_admin_post(self, post_id: str) -> PostResponse:
        try:
            result = self.supabase.table("posts")\
                .select(POST_SELECT)\
                .eq("id", post_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch post: {str(e)}")

    def _unique_slug(self, source: str, exclude_id: Optional[str] = None) -> str:
        slug = generate_slug(source, POST_SLUG_MAX_LENGTH)
        if not slug:
            raise HTTPException(status_code=400, detail="Post title must contain letters or digits")
        query = self.supabase.table("posts").select("id").eq("slug", slug)
        if exclude_id:
            query = query.neq("id", exclude_id)
        if query.limit(1).execute().data:
            return timestamped_slug(slug)
        return slug

    def create_post(self, post: PostCreate, user_id: str) -> PostResponse:
        try:
            values = post.model_dump(mode="json")
            values["user_id"] = user_id
            values["slug"] = self._unique_slug(post.slug or post.title)
            if post.status == "published" and not post.published_at:
                values["published_at"] = utc_now_iso()

            result = self.supabase.table("posts").insert(values).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create post")
            logger.info(f"Created post {values['slug']}")
            return self.get_admin_post(result.data[0]["id"])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to create post: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create post: {str(e)}")

    def update_post(self, post_id: str, update: PostUpdate) -> PostResponse:
        """Partial update; a new title without a slug regenerates the slug"""
        try:
            values = update.model_dump(mode="json", exclude_unset=True)
            if values.get("slug"):
                values["slug"] = self._unique_slug(values["slug"], exclude_id=post_id)
            elif values.get("title"):
                values["slug"] = self._unique_slug(values["title"], exclude_id=post_id)
            else:
                values.pop("slug", None)

            if values.get("status") == "published" and not values.get("published_at"):
                current = self.supabase.table("posts")\
                    .select("published_at")\
                    .eq("id", post_id)\
                    .limit(1)\
                    .execute()
                if current.data and not current.data[0].get("published_at"):
                    values["published_at"] = utc_now_iso()
            values["updated_at"] = utc_now_iso()

            result = self.supabase.table("posts")\
                .update(values)\
                .eq("id", post_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")
            return self.get_admin_post(post_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to update post: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update post: {str(e)}")

    def delete_post(self, post_id: str) -> bool:
        try:
            result = self.supabase.table("posts")\
                .delete()\
                .eq("id", post_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete post: {str(e)}")

    def bulk_update_post_status(self, ids: List[str], status: str) -> int:
        try:
            values: Dict[str, Any] = {"status": status, "updated_at": utc_now_iso()}
            if status == "published":
                values["published_at"] = utc_now_iso()
            result = self.supabase.table("posts")\
                .update(values)\
                .in_("id", ids)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update posts: {str(e)}")

    def _count(self, status: Optional[str] = None) -> int:
        query = self.supabase.table("posts").select("id", count="exact", head=True)
        if status:
            query = query.eq("status", status)
        return query.execute().count or 0

    def get_post_stats(self) -> PostStats:
        try:
            views = self.supabase.table("posts").select("view_count").execute()
            return PostStats(
                total=self._count(),
                published=self._count("published"),
                draft=self._count("draft"),
                scheduled=self._count("scheduled"),
                total_views=sum(row.get("view_count") or 0 for row in (views.data or [])),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch post stats: {str(e)}")
