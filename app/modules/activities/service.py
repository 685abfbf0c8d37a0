import logging
from supabase import Client
from app.core.utils import utc_now, page_range
from app.modules.activities.models import (
    DEFAULT_THEME_CONFIG, PUBLISHED_ACTIVITIES_LIMIT, RECENT_PLAYS_LIMIT, SUGGESTION_COLUMNS
)
from app.modules.activities.schemas import (
    SaveActivityRequest, SaveActivityResponse, ActivityDetailResponse, CanPlayResult,
    RecordPlayRequest, RecordPlayResponse, UpdatePlayRecordRequest, ActivePlaySession,
    ActivitySettingsUpdate, UserStats, RecentPlay, ActivityResult, ActivityResultsResponse,
    SuggestedActivity
)
from app.modules.activities.quest_builder import build_stage_rows, reconstruct_quest
from app.modules.activities.play_rules import check_availability, build_play_session, can_view_activity
from app.modules.activities.suggestions import extract_keywords, escape_like
from app.modules.storage.service import StorageService
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # ============================================
    # Create / edit
    # ============================================

    def _write_stages(self, activity_id: str, quest) -> None:
        for stage_row, question_rows in build_stage_rows(quest):
            stage_result = self.supabase.table("stages")\
                .insert({**stage_row, "activity_id": activity_id})\
                .execute()
            if not stage_result.data:
                raise HTTPException(status_code=500, detail="Failed to save stage")
            if not question_rows:
                continue
            stage_id = stage_result.data[0]["id"]
            self.supabase.table("questions")\
                .insert([{**row, "stage_id": stage_id} for row in question_rows])\
                .execute()

    def save_activity(self, request: SaveActivityRequest, user_id: str) -> SaveActivityResponse:
        """Save a generated quest as a draft activity with its stages and questions"""
        try:
            quest = request.quest
            result = self.supabase.table("activities").insert({
                "user_id": user_id,
                "title": quest.title,
                "description": quest.description or None,
                "thumbnail": quest.thumbnail or None,
                "tags": quest.tags or None,
                "raw_content": request.raw_content,
                "theme_config": request.theme_config.model_dump(by_alias=True),
                "status": "draft",
                "type": quest.type,
                "category_id": request.category_id,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save activity")

            activity_id = result.data[0]["id"]
            self._write_stages(activity_id, quest)
            logger.info(f"Saved {quest.type} activity {activity_id} for user {user_id}")
            return SaveActivityResponse(activity_id=activity_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to save activity: {str(e)}")

    def update_activity(self, activity_id: str, request: SaveActivityRequest) -> SaveActivityResponse:
        """Replace an activity's content: update the row, drop its stages (questions cascade) and rebuild them"""
        try:
            quest = request.quest
            self.supabase.table("activities").update({
                "title": quest.title,
                "description": quest.description or None,
                "thumbnail": quest.thumbnail or None,
                "tags": quest.tags or None,
                "raw_content": request.raw_content,
                "theme_config": request.theme_config.model_dump(by_alias=True),
                "type": quest.type,
                "category_id": request.category_id,
            }).eq("id", activity_id).execute()

            self.supabase.table("stages")\
                .delete()\
                .eq("activity_id", activity_id)\
                .execute()

            self._write_stages(activity_id, quest)
            return SaveActivityResponse(activity_id=activity_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update activity: {str(e)}")

    def publish_activity(self, activity_id: str, public_enabled: bool = True) -> bool:
        if not public_enabled:
            raise HTTPException(status_code=403, detail="Publishing public activities is currently disabled")
        try:
            self.supabase.table("activities")\
                .update({"status": "public"})\
                .eq("id", activity_id)\
                .execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to publish activity: {str(e)}")

    def delete_activity(self, activity: Dict[str, Any]) -> bool:
        """Delete an activity row and its thumbnail from storage"""
        try:
            StorageService(self.supabase).remove_activity_thumbnail(
                activity.get("thumbnail"), activity.get("user_id")
            )
            self.supabase.table("activities")\
                .delete()\
                .eq("id", activity["id"])\
                .execute()
            logger.info(f"Deleted activity {activity['id']}")
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete activity: {str(e)}")

    def update_activity_settings(self, activity_id: str, update: ActivitySettingsUpdate) -> bool:
        """Write only the settings present in the request; explicit nulls clear a setting"""
        values = update.model_dump(mode="json", exclude_unset=True)
        if not values:
            return True
        try:
            self.supabase.table("activities")\
                .update(values)\
                .eq("id", activity_id)\
                .execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update activity settings: {str(e)}")

    # ============================================
    # Invites (private_group)
    # ============================================

    def get_allowed_emails(self, activity_id: str) -> List[str]:
        try:
            result = self.supabase.table("activity_pending_invites")\
                .select("email")\
                .eq("activity_id", activity_id)\
                .order("created_at")\
                .execute()
            return [row["email"] for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_allowed_emails(self, activity_id: str, emails: List[str]) -> List[str]:
        """Replace the invite list with normalized, de-duplicated emails"""
        normalized = []
        for email in emails:
            email = email.strip().lower()
            if email and email not in normalized:
                normalized.append(email)
        try:
            self.supabase.table("activity_pending_invites")\
                .delete()\
                .eq("activity_id", activity_id)\
                .execute()
            if normalized:
                self.supabase.table("activity_pending_invites")\
                    .insert([{"activity_id": activity_id, "email": email} for email in normalized])\
                    .execute()
            return normalized
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update allowed emails: {str(e)}")

    # ============================================
    # Read
    # ============================================

    def get_published_activities(self) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("activities")\
                .select(
                    "id, created_at, user_id, title, description, thumbnail, type, theme_config, play_count, "
                    "stages(id, title, order_index), profiles(display_name, avatar_url)"
                )\
                .eq("status", "public")\
                .order("created_at", desc=True)\
                .limit(PUBLISHED_ACTIVITIES_LIMIT)\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch activities: {str(e)}")

    def _get_activity_row(self, activity_id: str) -> Dict[str, Any]:
        result = self.supabase.table("activities")\
            .select("*")\
            .eq("id", activity_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Activity not found")
        return result.data[0]

    def _build_detail(self, activity: Dict[str, Any]) -> ActivityDetailResponse:
        stages_result = self.supabase.table("stages")\
            .select("*")\
            .eq("activity_id", activity["id"])\
            .order("order_index")\
            .execute()
        stages = stages_result.data or []

        questions = []
        stage_ids = [s["id"] for s in stages]
        if stage_ids:
            questions_result = self.supabase.table("questions")\
                .select("*")\
                .in_("stage_id", stage_ids)\
                .order("order_index")\
                .execute()
            questions = questions_result.data or []

        return ActivityDetailResponse(
            activity=activity,
            generated_quest=reconstruct_quest(activity, stages, questions),
            theme_config=activity.get("theme_config") or dict(DEFAULT_THEME_CONFIG),
        )

    def _is_invited(self, activity_id: str, email: Optional[str]) -> bool:
        if not email:
            return False
        result = self.supabase.table("activity_pending_invites")\
            .select("id")\
            .eq("activity_id", activity_id)\
            .eq("email", email.lower())\
            .limit(1)\
            .execute()
        return bool(result.data)

    def _is_owner_deleted(self, owner_id: Optional[str]) -> bool:
        if not owner_id:
            return False
        result = self.supabase.table("profiles")\
            .select("deleted_at")\
            .eq("id", owner_id)\
            .limit(1)\
            .execute()
        return bool(result.data and result.data[0].get("deleted_at"))

    def get_activity(self, activity_id: str, viewer: Optional[Dict[str, Any]] = None,
                     viewer_is_admin: bool = False) -> ActivityDetailResponse:
        """Activity with its generated quest, if the viewer may see it (404 otherwise)"""
        try:
            activity = self._get_activity_row(activity_id)
            viewer_id = viewer["id"] if viewer else None
            is_owner = viewer_id is not None and activity.get("user_id") == viewer_id
            visible = can_view_activity(
                activity,
                viewer_id,
                invited=activity.get("status") == "private_group" and not is_owner
                and self._is_invited(activity_id, viewer.get("email") if viewer else None),
                owner_deleted=not is_owner and self._is_owner_deleted(activity.get("user_id")),
                viewer_is_admin=viewer_is_admin,
            )
            if not visible:
                raise HTTPException(status_code=404, detail="Activity not found")
            return self._build_detail(activity)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_activity_for_edit(self, activity_id: str, user_id: str) -> ActivityDetailResponse:
        try:
            activity = self._get_activity_row(activity_id)
            if activity.get("user_id") != user_id:
                raise HTTPException(status_code=403, detail="You can only edit your own activities")
            return self._build_detail(activity)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_activities(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("activities")\
                .select("id, created_at, title, description, thumbnail, type, status, play_count, tags, category_id")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def increment_play_count(self, activity_id: str) -> int:
        try:
            activity = self.supabase.table("activities")\
                .select("play_count")\
                .eq("id", activity_id)\
                .limit(1)\
                .execute()
            if not activity.data:
                raise HTTPException(status_code=404, detail="Activity not found")
            play_count = (activity.data[0].get("play_count") or 0) + 1
            self.supabase.table("activities")\
                .update({"play_count": play_count})\
                .eq("id", activity_id)\
                .execute()
            return play_count
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ============================================
    # Play rules and records
    # ============================================

    def check_can_play(self, activity_id: str, user_id: Optional[str]) -> CanPlayResult:
        try:
            if not user_id:
                result = self.supabase.table("activities")\
                    .select("available_from, available_until")\
                    .eq("id", activity_id)\
                    .limit(1)\
                    .execute()
                activity = result.data[0] if result.data else None
                return check_availability(activity, utc_now())

            result = self.supabase.rpc("can_user_play_activity", {
                "p_activity_id": activity_id,
                "p_user_id": user_id,
            }).execute()
            return CanPlayResult(**result.data)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to check play eligibility: {str(e)}")

    def record_play(self, activity_id: str, user_id: str, request: RecordPlayRequest) -> RecordPlayResponse:
        try:
            result = self.supabase.rpc("record_activity_play", {
                "p_activity_id": activity_id,
                "p_user_id": user_id,
                "p_score": request.score,
                "p_duration_seconds": request.duration_seconds,
                "p_completed": request.completed,
            }).execute()
            return RecordPlayResponse(play_record_id=str(result.data))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to record play: {str(e)}")

    def update_play_record(self, play_record_id: str, user_id: str, request: UpdatePlayRecordRequest) -> bool:
        try:
            result = self.supabase.table("activity_play_records")\
                .update({
                    "score": request.score,
                    "duration_seconds": request.duration_seconds,
                    "completed": request.completed,
                })\
                .eq("id", play_record_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Play record not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update play record: {str(e)}")

    def get_play_history(self, activity_id: str, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("activity_play_records")\
                .select("*")\
                .eq("activity_id", activity_id)\
                .eq("user_id", user_id)\
                .order("played_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get play history: {str(e)}")

    def get_active_play_session(self, activity_id: str, user_id: str,
                                play_record_id: Optional[str] = None) -> Optional[ActivePlaySession]:
        """Latest unfinished play (or the given one) with time-limit bookkeeping; None if there is none"""
        try:
            query = self.supabase.table("activity_play_records")\
                .select("id, started_at")\
                .eq("user_id", user_id)
            if play_record_id:
                query = query.eq("id", play_record_id)
            else:
                query = query.eq("activity_id", activity_id)\
                    .eq("completed", False)\
                    .order("started_at", desc=True)
            records = query.limit(1).execute()
            if not records.data:
                return None

            activity = self.supabase.table("activities")\
                .select("time_limit_minutes, available_until")\
                .eq("id", activity_id)\
                .limit(1)\
                .execute()
            if not activity.data:
                return None

            return build_play_session(records.data[0], activity.data[0], utc_now())
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ============================================
    # Player stats
    # ============================================

    def get_user_stats(self, user_id: str) -> UserStats:
        try:
            result = self.supabase.table("activity_play_records")\
                .select("id, activity_id, played_at, score, completed, activities(title, thumbnail)")\
                .eq("user_id", user_id)\
                .order("played_at", desc=True)\
                .execute()
            records = result.data or []

            recent_plays = []
            for record in records[:RECENT_PLAYS_LIMIT]:
                activity = record.get("activities") or {}
                recent_plays.append(RecentPlay(
                    id=record["id"],
                    activity_id=record["activity_id"],
                    activity_title=activity.get("title") or "Unknown",
                    activity_thumbnail=activity.get("thumbnail"),
                    played_at=record["played_at"],
                    score=record.get("score"),
                    completed=bool(record.get("completed")),
                ))

            return UserStats(
                total_activities_played=len({r["activity_id"] for r in records}),
                total_score=sum(r.get("score") or 0 for r in records),
                completed_activities=len({r["activity_id"] for r in records if r.get("completed")}),
                recent_plays=recent_plays,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get user stats: {str(e)}")

    def get_activity_results(self, user_id: str, page: int = 1, page_size: int = 20) -> ActivityResultsResponse:
        try:
            start, end = page_range(page, page_size)
            result = self.supabase.table("activity_play_records")\
                .select(
                    "id, activity_id, played_at, score, completed, duration_seconds, "
                    "activities(title, thumbnail, type)",
                    count="exact"
                )\
                .eq("user_id", user_id)\
                .order("played_at", desc=True)\
                .range(start, end)\
                .execute()
            total = result.count or 0

            results = []
            for record in result.data or []:
                activity = record.get("activities") or {}
                results.append(ActivityResult(
                    id=record["id"],
                    activity_id=record["activity_id"],
                    activity_title=activity.get("title") or "Unknown",
                    activity_thumbnail=activity.get("thumbnail"),
                    activity_type=activity.get("type") or "quiz",
                    played_at=record["played_at"],
                    score=record.get("score"),
                    completed=bool(record.get("completed")),
                    time_spent=record.get("duration_seconds"),
                ))

            return ActivityResultsResponse(
                results=results,
                total=total,
                page=page,
                page_size=page_size,
                has_more=start + len(results) < total,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get activity results: {str(e)}")

    # ============================================
    # Suggestions
    # ============================================

    def _popular_activities(self, limit: int) -> List[Dict[str, Any]]:
        result = self.supabase.table("activities")\
            .select(SUGGESTION_COLUMNS)\
            .eq("status", "public")\
            .order("play_count", desc=True)\
            .limit(limit)\
            .execute()
        return result.data or []

    def get_suggested_activities(self, content: str, limit: int = 5) -> List[SuggestedActivity]:
        """Public activities related to a piece of content, falling back to the most played ones"""
        try:
            keywords = [k for k in (escape_like(k) for k in extract_keywords(content)) if k]
            if not keywords:
                return [SuggestedActivity(**a) for a in self._popular_activities(limit)]

            first = keywords[0]
            second = keywords[1] if len(keywords) > 1 else first
            title_matches = self.supabase.table("activities")\
                .select(SUGGESTION_COLUMNS)\
                .eq("status", "public")\
                .or_(f"title.ilike.%{first}%,title.ilike.%{second}%")\
                .order("play_count", desc=True)\
                .limit(limit)\
                .execute()
            title_rows = title_matches.data or []
            if len(title_rows) >= limit:
                return [SuggestedActivity(**a) for a in title_rows]

            tag_matches = self.supabase.table("activities")\
                .select(SUGGESTION_COLUMNS)\
                .eq("status", "public")\
                .overlaps("tags", keywords[:5])\
                .order("play_count", desc=True)\
                .limit(limit)\
                .execute()

            seen = set()
            unique = []
            for activity in title_rows + (tag_matches.data or []):
                if activity["id"] in seen:
                    continue
                seen.add(activity["id"])
                unique.append(activity)
            if unique:
                return [SuggestedActivity(**a) for a in unique[:limit]]

            return [SuggestedActivity(**a) for a in self._popular_activities(limit)]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get suggestions: {str(e)}")
