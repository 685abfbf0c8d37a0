import logging
import math
from collections import Counter
from datetime import datetime, timedelta
from supabase import Client
from app.core.utils import page_range, utc_now, utc_now_iso, parse_timestamp, ilike_filter
from app.modules.auth.models import ACCOUNT_DELETION_GRACE_DAYS, USER_ROLES
from app.modules.users.models import RECENT_USER_ACTIVITIES_LIMIT
from app.modules.users.schemas import (
    AdminUserResponse, UsersPage, UserDetails, UserDetailStats,
    UserOverviewStats, PendingDeletion
)
from typing import List, Optional, Tuple
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def deletion_schedule(deleted_at, now: datetime) -> Tuple[datetime, int]:
    """(permanent deletion date, whole days remaining rounded up, never negative)"""
    permanent = parse_timestamp(deleted_at) + timedelta(days=ACCOUNT_DELETION_GRACE_DAYS)
    remaining = (permanent - now).total_seconds() / 86400
    return permanent, max(0, math.ceil(remaining))


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_users(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc"
    ) -> UsersPage:
        """Profiles with their activity counts; activity_count sorts within the page"""
        try:
            query = self.supabase.table("profiles").select("*", count="exact")
            if search:
                query = query.or_(ilike_filter(["display_name", "email"], search))
            if role:
                query = query.eq("role", role)
            order_column = "created_at" if sort_by == "activity_count" else sort_by
            start, end = page_range(page, page_size)
            result = query\
                .order(order_column, desc=sort_order != "asc")\
                .range(start, end)\
                .execute()
            profiles = result.data or []
            total = result.count or 0

            counts = Counter()
            if profiles:
                activities = self.supabase.table("activities")\
                    .select("user_id")\
                    .in_("user_id", [p["id"] for p in profiles])\
                    .execute()
                counts = Counter(row["user_id"] for row in (activities.data or []))

            users = [AdminUserResponse(**p, activity_count=counts.get(p["id"], 0)) for p in profiles]
            if sort_by == "activity_count":
                users.sort(key=lambda u: u.activity_count, reverse=sort_order != "asc")

            return UsersPage(
                users=users,
                total=total,
                page=page,
                page_size=page_size,
                has_more=start + len(users) < total,
            )
        except Exception as e:
            logger.error(f"Failed to fetch users: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")

    def get_user_details(self, user_id: str) -> UserDetails:
        try:
            profile = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            if not profile.data:
                raise HTTPException(status_code=404, detail="User not found")

            activities = self.supabase.table("activities")\
                .select("id, title, thumbnail, type, status, play_count, created_at")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            activity_rows = activities.data or []

            reports = self.supabase.table("reports")\
                .select("id", count="exact", head=True)\
                .eq("reporter_id", user_id)\
                .execute()
            reports_against = 0
            if activity_rows:
                against = self.supabase.table("reports")\
                    .select("id", count="exact", head=True)\
                    .eq("content_type", "activity")\
                    .in_("content_id", [a["id"] for a in activity_rows])\
                    .execute()
                reports_against = against.count or 0

            return UserDetails(
                profile=profile.data[0],
                activities=activity_rows[:RECENT_USER_ACTIVITIES_LIMIT],
                stats=UserDetailStats(
                    activity_count=len(activity_rows),
                    total_plays=sum(a.get("play_count") or 0 for a in activity_rows),
                    reports_count=reports.count or 0,
                    reports_against_count=reports_against,
                ),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch user details: {str(e)}")

    def update_user_role(self, user_id: str, role: str, admin_id: str) -> bool:
        if user_id == admin_id:
            raise HTTPException(status_code=400, detail="Cannot change your own role")
        if role not in USER_ROLES:
            raise HTTPException(status_code=400, detail="Invalid role value")
        try:
            result = self.supabase.table("profiles")\
                .update({"role": role, "updated_at": utc_now_iso()})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")
            logger.info(f"User {user_id} role set to {role} by {admin_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update user role: {str(e)}")

    def _count(self, since: Optional[str] = None, pending: bool = False, **filters) -> int:
        query = self.supabase.table("profiles").select("id", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        if since:
            query = query.gte("created_at", since)
        if pending:
            query = query.not_.is_("deleted_at", "null")
        return query.execute().count or 0

    def get_user_overview_stats(self) -> UserOverviewStats:
        try:
            now = utc_now()
            stats = {"total": self._count()}
            for role in USER_ROLES:
                stats[role] = self._count(role=role)
            stats["this_week"] = self._count(since=(now - timedelta(days=7)).isoformat())
            stats["this_month"] = self._count(since=(now - timedelta(days=30)).isoformat())
            stats["pending_deletion"] = self._count(pending=True)
            return UserOverviewStats(**stats)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch user stats: {str(e)}")

    def get_pending_deletions(self) -> List[PendingDeletion]:
        """Accounts marked for deletion, most recent first"""
        try:
            result = self.supabase.table("profiles")\
                .select("id, display_name, email, deleted_at, created_at")\
                .not_.is_("deleted_at", "null")\
                .order("deleted_at", desc=True)\
                .execute()
            now = utc_now()
            pending = []
            for row in result.data or []:
                permanent, days_remaining = deletion_schedule(row["deleted_at"], now)
                pending.append(PendingDeletion(
                    **row,
                    permanent_deletion_date=permanent,
                    days_remaining=days_remaining,
                ))
            return pending
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch pending deletions: {str(e)}")

    def restore_account(self, user_id: str) -> bool:
        """Clear deleted_at so the account is no longer purged"""
        try:
            result = self.supabase.table("profiles")\
                .update({"deleted_at": None, "updated_at": utc_now_iso()})\
                .eq("id", user_id)\
                .not_.is_("deleted_at", "null")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="No pending deletion for this user")
            logger.info(f"Restored account {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to restore account: {str(e)}")
