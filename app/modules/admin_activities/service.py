import logging
from datetime import timedelta
from supabase import Client
from app.core.utils import page_range, utc_now, index_by, ilike_filter
from app.modules.activities.service import ActivityService
from app.modules.admin_activities.schemas import AdminActivity, AdminActivitiesPage, AdminActivityStats
from typing import Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)

STATUS_KEYS = ("public", "draft", "private_group", "link")
TYPE_KEYS = ("quiz", "quest", "lesson")


class AdminActivityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_admin_activities(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        activity_type: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc"
    ) -> AdminActivitiesPage:
        """Activities of every user, with their creator's profile"""
        try:
            query = self.supabase.table("activities")\
                .select("id, title, thumbnail, type, status, play_count, created_at, user_id", count="exact")
            if search:
                query = query.or_(ilike_filter(["title"], search))
            if status:
                query = query.eq("status", status)
            if activity_type:
                query = query.eq("type", activity_type)

            start, end = page_range(page, page_size)
            result = query\
                .order(sort_by, desc=sort_order != "asc")\
                .range(start, end)\
                .execute()
            rows = result.data or []
            total = result.count or 0

            user_ids = list({row["user_id"] for row in rows if row.get("user_id")})
            creators = {}
            if user_ids:
                profiles = self.supabase.table("profiles")\
                    .select("id, display_name, avatar_url")\
                    .in_("id", user_ids)\
                    .execute()
                creators = index_by(profiles.data or [])

            return AdminActivitiesPage(
                activities=[
                    AdminActivity(**row, creator=creators.get(row.get("user_id")))
                    for row in rows
                ],
                total=total,
                page=page,
                page_size=page_size,
                has_more=start + len(rows) < total,
            )
        except Exception as e:
            logger.error(f"Failed to fetch admin activities: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch activities: {str(e)}")

    def _count(self, column: Optional[str] = None, value: Any = None, since: Optional[str] = None) -> int:
        query = self.supabase.table("activities").select("id", count="exact", head=True)
        if column:
            query = query.eq(column, value)
        if since:
            query = query.gte("created_at", since)
        return query.execute().count or 0

    def get_admin_activity_stats(self) -> AdminActivityStats:
        try:
            now = utc_now()
            week_ago = (now - timedelta(days=7)).isoformat()
            month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0).isoformat()

            stats: Dict[str, int] = {"total": self._count()}
            for status in STATUS_KEYS:
                stats[status] = self._count("status", status)
            for activity_type in TYPE_KEYS:
                stats[activity_type] = self._count("type", activity_type)
            stats["this_week"] = self._count(since=week_ago)
            stats["this_month"] = self._count(since=month_start)
            return AdminActivityStats(**stats)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch activity stats: {str(e)}")

    def update_activity_status(self, activity_id: str, status: str) -> bool:
        try:
            result = self.supabase.table("activities")\
                .update({"status": status})\
                .eq("id", activity_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Activity not found")
            logger.info(f"Admin set activity {activity_id} status to {status}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update activity status: {str(e)}")

    def delete_activity_admin(self, activity_id: str) -> bool:
        """Delete any activity; its thumbnail is removed from the owner's storage folder"""
        result = self.supabase.table("activities")\
            .select("id, user_id, thumbnail")\
            .eq("id", activity_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Activity not found")
        return ActivityService(self.supabase).delete_activity(result.data[0])
