import logging
from datetime import timedelta
from supabase import Client
from app.core.utils import utc_now, index_by
from app.modules.activities.models import ACTIVITY_TYPES
from app.modules.auth.models import USER_ROLES
from app.modules.analytics.aggregation import daily_buckets, distribution, rank_creators
from app.modules.analytics.schemas import (
    OverviewStats, GrowthDataPoint, TypeDistribution, StatusDistribution,
    RoleDistribution, TopCreator, TopActivity
)
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

STATUS_ORDER = ("public", "draft", "private_group", "link")


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, since: Optional[str] = None, live_only: bool = False, **filters) -> int:
        query = self.supabase.table(table).select("id", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        if since:
            query = query.gte("created_at", since)
        if live_only:
            query = query.is_("deleted_at", "null")
        return query.execute().count or 0

    def get_overview_stats(self) -> OverviewStats:
        try:
            now = utc_now()
            week_ago = (now - timedelta(days=7)).isoformat()
            month_ago = (now - timedelta(days=30)).isoformat()

            total_activities = self._count("activities")
            plays = self.supabase.table("activities").select("play_count").execute()
            total_plays = sum(row.get("play_count") or 0 for row in (plays.data or []))

            return OverviewStats(
                total_users=self._count("profiles", live_only=True),
                total_activities=total_activities,
                public_activities=self._count("activities", status="public"),
                total_plays=total_plays,
                users_this_week=self._count("profiles", since=week_ago, live_only=True),
                users_this_month=self._count("profiles", since=month_ago, live_only=True),
                activities_this_week=self._count("activities", since=week_ago),
                activities_this_month=self._count("activities", since=month_ago),
                avg_plays_per_activity=round(total_plays / total_activities) if total_activities else 0,
            )
        except Exception as e:
            logger.error(f"Failed to fetch overview stats: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch overview stats: {str(e)}")

    def _growth(self, table: str, days: int, live_only: bool) -> List[GrowthDataPoint]:
        now = utc_now()
        start = (now - timedelta(days=days)).isoformat()
        query = self.supabase.table(table)\
            .select("created_at")\
            .gte("created_at", start)
        if live_only:
            query = query.is_("deleted_at", "null")
        result = query.order("created_at").execute()
        buckets = daily_buckets((row.get("created_at") for row in (result.data or [])), days, now.date())
        return [GrowthDataPoint(**bucket) for bucket in buckets]

    def get_user_growth(self, days: int = 30) -> List[GrowthDataPoint]:
        """New (non-deleted) users per day"""
        try:
            return self._growth("profiles", days, live_only=True)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch user growth: {str(e)}")

    def get_activity_growth(self, days: int = 30) -> List[GrowthDataPoint]:
        try:
            return self._growth("activities", days, live_only=False)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch activity growth: {str(e)}")

    def get_activity_type_distribution(self) -> List[TypeDistribution]:
        try:
            counts = [(t, self._count("activities", type=t)) for t in ACTIVITY_TYPES]
            return [TypeDistribution(**row) for row in distribution(counts, "type")]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch type distribution: {str(e)}")

    def get_activity_status_distribution(self) -> List[StatusDistribution]:
        try:
            counts = [(s, self._count("activities", status=s)) for s in STATUS_ORDER]
            return [StatusDistribution(**row) for row in distribution(counts, "status")]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch status distribution: {str(e)}")

    def get_user_role_distribution(self) -> List[RoleDistribution]:
        try:
            counts = [(r, self._count("profiles", live_only=True, role=r)) for r in USER_ROLES]
            return [RoleDistribution(**row) for row in distribution(counts, "role")]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch role distribution: {str(e)}")

    def get_top_creators(self, limit: int = 10) -> List[TopCreator]:
        """Users with the most activities, with the plays those activities collected"""
        try:
            activities = self.supabase.table("activities")\
                .select("user_id, play_count")\
                .not_.is_("user_id", "null")\
                .execute()
            ranked = rank_creators(activities.data or [], limit)
            if not ranked:
                return []
            profiles = self.supabase.table("profiles")\
                .select("id, display_name, avatar_url")\
                .in_("id", [user_id for user_id, _, _ in ranked])\
                .execute()
            by_id = index_by(profiles.data or [])
            return [
                TopCreator(
                    id=user_id,
                    display_name=by_id.get(user_id, {}).get("display_name"),
                    avatar_url=by_id.get(user_id, {}).get("avatar_url"),
                    activity_count=activity_count,
                    total_plays=total_plays,
                )
                for user_id, activity_count, total_plays in ranked
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch top creators: {str(e)}")

    def get_top_activities(self, limit: int = 10) -> List[TopActivity]:
        try:
            activities = self.supabase.table("activities")\
                .select("id, title, thumbnail, type, play_count, user_id")\
                .eq("status", "public")\
                .order("play_count", desc=True)\
                .limit(limit)\
                .execute()
            rows = activities.data or []
            user_ids = list({row["user_id"] for row in rows if row.get("user_id")})
            names = {}
            if user_ids:
                profiles = self.supabase.table("profiles")\
                    .select("id, display_name")\
                    .in_("id", user_ids)\
                    .execute()
                names = {p["id"]: p.get("display_name") for p in (profiles.data or [])}
            return [
                TopActivity(
                    id=row["id"],
                    title=row["title"],
                    thumbnail=row.get("thumbnail"),
                    type=row.get("type"),
                    play_count=row.get("play_count") or 0,
                    creator_name=names.get(row.get("user_id")),
                )
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch top activities: {str(e)}")
