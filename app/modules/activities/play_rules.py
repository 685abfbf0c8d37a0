import math
from datetime import datetime
from typing import Any, Dict, Optional
from app.core.utils import parse_timestamp
from app.modules.activities.schemas import CanPlayResult, ActivePlaySession


def check_availability(activity: Optional[Dict[str, Any]], now: datetime) -> CanPlayResult:
    """Availability-window check used for guests (no replay limit tracking)."""
    if not activity:
        return CanPlayResult(can_play=False, reason="activity_not_found")

    available_from = activity.get("available_from")
    if available_from and parse_timestamp(available_from) > now:
        return CanPlayResult(
            can_play=False,
            reason="not_yet_available",
            available_from=parse_timestamp(available_from),
        )

    available_until = activity.get("available_until")
    if available_until and parse_timestamp(available_until) < now:
        return CanPlayResult(
            can_play=False,
            reason="expired",
            available_until=parse_timestamp(available_until),
        )

    return CanPlayResult(can_play=True, reason="unlimited")


def build_play_session(play_record: Dict[str, Any], activity: Dict[str, Any], now: datetime) -> ActivePlaySession:
    started_at = parse_timestamp(play_record["started_at"])
    time_limit = activity.get("time_limit_minutes")
    available_until = activity.get("available_until")

    is_expired = False
    remaining_seconds = None
    if time_limit:
        elapsed = (now - started_at).total_seconds()
        remaining_seconds = max(0, math.floor(time_limit * 60 - elapsed))
        if remaining_seconds <= 0:
            is_expired = True

    if available_until and parse_timestamp(available_until) < now:
        is_expired = True

    return ActivePlaySession(
        play_record_id=play_record["id"],
        started_at=started_at,
        time_limit_minutes=time_limit,
        available_until=parse_timestamp(available_until) if available_until else None,
        is_expired=is_expired,
        remaining_seconds=remaining_seconds,
    )


def can_view_activity(activity: Dict[str, Any], viewer_id: Optional[str], invited: bool = False,
                      owner_deleted: bool = False, viewer_is_admin: bool = False) -> bool:
    """Owners and admins see everything; others see public/link activities, or private_group ones they are invited to."""
    if viewer_is_admin or (viewer_id and activity.get("user_id") == viewer_id):
        return True
    if owner_deleted:
        return False
    status = activity.get("status")
    if status in ("public", "link"):
        return True
    if status == "private_group":
        return invited
    return False
