"""
Tests for availability windows, play sessions and activity visibility.
"""

from datetime import datetime, timedelta, timezone

from app.modules.activities.play_rules import (
    build_play_session,
    can_view_activity,
    check_availability,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def iso(dt):
    return dt.isoformat()


class TestCheckAvailability:
    def test_missing_activity(self):
        result = check_availability(None, NOW)
        assert not result.can_play
        assert result.reason == "activity_not_found"

    def test_not_yet_available(self):
        result = check_availability({"available_from": iso(NOW + timedelta(hours=1))}, NOW)
        assert result.reason == "not_yet_available"
        assert result.available_from == NOW + timedelta(hours=1)

    def test_expired(self):
        result = check_availability({"available_until": iso(NOW - timedelta(minutes=1))}, NOW)
        assert result.reason == "expired"
        assert not result.can_play

    def test_open_window(self):
        activity = {
            "available_from": iso(NOW - timedelta(days=1)),
            "available_until": iso(NOW + timedelta(days=1)),
        }
        result = check_availability(activity, NOW)
        assert result.can_play
        assert result.reason == "unlimited"


class TestBuildPlaySession:
    def test_remaining_time(self):
        record = {"id": "p1", "started_at": iso(NOW - timedelta(minutes=4))}
        session = build_play_session(record, {"time_limit_minutes": 10}, NOW)

        assert session.remaining_seconds == 360
        assert not session.is_expired

    def test_time_limit_elapsed(self):
        record = {"id": "p1", "started_at": iso(NOW - timedelta(minutes=11))}
        session = build_play_session(record, {"time_limit_minutes": 10}, NOW)

        assert session.remaining_seconds == 0
        assert session.is_expired

    def test_window_closed(self):
        record = {"id": "p1", "started_at": iso(NOW - timedelta(minutes=1))}
        session = build_play_session(record, {"available_until": iso(NOW - timedelta(seconds=1))}, NOW)

        assert session.is_expired
        assert session.remaining_seconds is None


class TestCanViewActivity:
    def test_owner_sees_draft(self):
        assert can_view_activity({"user_id": "u1", "status": "draft"}, "u1")

    def test_stranger_cannot_see_draft(self):
        assert not can_view_activity({"user_id": "u1", "status": "draft"}, "u2")

    def test_public_and_link_are_visible(self):
        assert can_view_activity({"user_id": "u1", "status": "public"}, None)
        assert can_view_activity({"user_id": "u1", "status": "link"}, "u2")

    def test_private_group_needs_invite(self):
        activity = {"user_id": "u1", "status": "private_group"}
        assert not can_view_activity(activity, "u2")
        assert can_view_activity(activity, "u2", invited=True)

    def test_deleted_owner_hides_content_except_from_admins(self):
        activity = {"user_id": "u1", "status": "public"}
        assert not can_view_activity(activity, "u2", owner_deleted=True)
        assert can_view_activity(activity, "u2", owner_deleted=True, viewer_is_admin=True)
