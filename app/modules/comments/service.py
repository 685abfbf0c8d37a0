import logging
from collections import defaultdict
from supabase import Client
from app.core.utils import page_range, total_pages, utc_now_iso
from app.modules.comments.models import COMMENT_SELECT, ADMIN_COMMENT_SELECT, MAX_COMMENT_LENGTH
from app.modules.comments.schemas import (
    CommentResponse, CommentThread, CommentsPage, AdminCommentsPage, CommentStats
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def validate_comment_body(body: str) -> str:
    """Trimmed body, 1 to MAX_COMMENT_LENGTH characters"""
    text = (body or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")
    if len(text) > MAX_COMMENT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters"
        )
    return text


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_post_comments(self, post_id: str, limit: int = 20, offset: int = 0) -> CommentsPage:
        """Approved top-level comments, newest first, each with its approved replies oldest first"""
        try:
            result = self.supabase.table("comments")\
                .select(COMMENT_SELECT, count="exact")\
                .eq("post_id", post_id)\
                .eq("status", "approved")\
                .is_("parent_id", "null")\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            comments = result.data or []

            replies_by_parent: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
            if comments:
                replies = self.supabase.table("comments")\
                    .select(COMMENT_SELECT)\
                    .in_("parent_id", [comment["id"] for comment in comments])\
                    .eq("status", "approved")\
                    .order("created_at")\
                    .execute()
                for reply in replies.data or []:
                    replies_by_parent[reply["parent_id"]].append(reply)

            threads = []
            for comment in comments:
                replies = replies_by_parent.get(comment["id"], [])
                threads.append(CommentThread(
                    **comment,
                    replies=[CommentResponse(**reply) for reply in replies],
                    reply_count=len(replies),
                ))
            return CommentsPage(comments=threads, total=result.count or 0)
        except Exception as e:
            logger.error(f"Failed to fetch comments: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch comments: {str(e)}")

    def get_comment_count(self, post_id: str) -> int:
        try:
            result = self.supabase.table("comments")\
                .select("id", count="exact", head=True)\
                .eq("post_id", post_id)\
                .eq("status", "approved")\
                .execute()
            return result.count or 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to count comments: {str(e)}")

    def _get_owner(self, comment_id: str) -> str:
        result = self.supabase.table("comments")\
            .select("user_id")\
            .eq("id", comment_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return result.data[0]["user_id"]

    def create_comment(
        self,
        post_id: str,
        body: str,
        user_id: str,
        parent_id: Optional[str] = None,
        auto_approve: bool = False
    ) -> CommentResponse:
        """Comment on a published post; only auto_approve (admin) comments skip moderation"""
        text = validate_comment_body(body)
        try:
            post = self.supabase.table("posts")\
                .select("id, allow_comments")\
                .eq("id", post_id)\
                .eq("status", "published")\
                .limit(1)\
                .execute()
            if not post.data:
                raise HTTPException(status_code=404, detail="Post not found")
            if post.data[0].get("allow_comments") is False:
                raise HTTPException(status_code=403, detail="Comments are disabled for this post")

            if parent_id:
                parent = self.supabase.table("comments")\
                    .select("id")\
                    .eq("id", parent_id)\
                    .eq("post_id", post_id)\
                    .eq("status", "approved")\
                    .limit(1)\
                    .execute()
                if not parent.data:
                    raise HTTPException(status_code=404, detail="Parent comment not found")

            result = self.supabase.table("comments").insert({
                "post_id": post_id,
                "user_id": user_id,
                "parent_id": parent_id,
                "body": text,
                "status": "approved" if auto_approve else "pending",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create comment")
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to create comment: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create comment: {str(e)}")

    def update_comment(self, comment_id: str, body: str, user_id: str) -> CommentResponse:
        text = validate_comment_body(body)
        try:
            if self._get_owner(comment_id) != user_id:
                raise HTTPException(status_code=403, detail="You can only edit your own comments")
            result = self.supabase.table("comments")\
                .update({"body": text, "updated_at": utc_now_iso()})\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update comment: {str(e)}")

    def delete_comment(self, comment_id: str, user_id: str, viewer_is_admin: bool = False) -> bool:
        """Owner or admin; replies go with it"""
        try:
            if not viewer_is_admin and self._get_owner(comment_id) != user_id:
                raise HTTPException(status_code=403, detail="You can only delete your own comments")
            return self.admin_delete_comment(comment_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete comment: {str(e)}")

    # ============================================
    # Admin
    # ============================================

    def get_admin_comments(
        self,
        page: int = 1,
        limit: int = 20,
        status: str = "all",
        post_id: Optional[str] = None
    ) -> AdminCommentsPage:
        try:
            query = self.supabase.table("comments").select(ADMIN_COMMENT_SELECT, count="exact")
            if status and status != "all":
                query = query.eq("status", status)
            if post_id:
                query = query.eq("post_id", post_id)

            start, end = page_range(page, limit)
            result = query\
                .order("created_at", desc=True)\
                .range(start, end)\
                .execute()
            total = result.count or 0
            return AdminCommentsPage(
                comments=[CommentResponse(**row) for row in (result.data or [])],
                total=total,
                page=page,
                total_pages=total_pages(total, limit),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch comments: {str(e)}")

    def update_comment_status(self, comment_id: str, status: str) -> CommentResponse:
        try:
            result = self.supabase.table("comments")\
                .update({"status": status, "updated_at": utc_now_iso()})\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update comment: {str(e)}")

    def bulk_update_comment_status(self, ids: List[str], status: str) -> int:
        try:
            result = self.supabase.table("comments")\
                .update({"status": status, "updated_at": utc_now_iso()})\
                .in_("id", ids)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update comments: {str(e)}")

    def admin_delete_comment(self, comment_id: str) -> bool:
        try:
            result = self.supabase.table("comments")\
                .delete()\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete comment: {str(e)}")

    def _count(self, status: Optional[str] = None) -> int:
        query = self.supabase.table("comments").select("id", count="exact", head=True)
        if status:
            query = query.eq("status", status)
        return query.execute().count or 0

    def get_comment_stats(self) -> CommentStats:
        try:
            return CommentStats(
                total=self._count(),
                pending=self._count("pending"),
                approved=self._count("approved"),
                spam=self._count("spam"),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch comment stats: {str(e)}")
