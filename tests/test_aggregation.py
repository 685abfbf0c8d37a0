"""
Tests for the pure helpers behind admin analytics, account deletion
schedules, category trees and comment validation.
"""

from datetime import date, datetime, timezone

import pytest
from fastapi import HTTPException

from app.modules.analytics.aggregation import daily_buckets, distribution, percentage, rank_creators
from app.modules.categories.service import build_category_tree
from app.modules.comments.models import MAX_COMMENT_LENGTH
from app.modules.comments.service import validate_comment_body
from app.modules.users.service import deletion_schedule


class TestPercentage:
    def test_rounds_halves_up(self):
        assert percentage(1, 8) == 13
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67

    def test_zero_total(self):
        assert percentage(5, 0) == 0


class TestDailyBuckets:
    def test_zero_filled_and_oldest_first(self):
        today = date(2024, 3, 10)
        timestamps = [
            "2024-03-10T08:00:00Z",
            "2024-03-10T23:59:59+00:00",
            "2024-03-08T00:00:00Z",
            "2024-02-01T00:00:00Z",
            None,
        ]
        buckets = daily_buckets(timestamps, 3, today)

        assert buckets == [
            {"date": "2024-03-08", "count": 1},
            {"date": "2024-03-09", "count": 0},
            {"date": "2024-03-10", "count": 2},
        ]


class TestDistribution:
    def test_drops_zero_counts(self):
        result = distribution([("quiz", 3), ("lesson", 0), ("quest", 1)], "type")

        assert result == [
            {"type": "quiz", "count": 3, "percentage": 75},
            {"type": "quest", "count": 1, "percentage": 25},
        ]


class TestRankCreators:
    def test_orders_by_activity_count(self):
        rows = [
            {"user_id": "a", "play_count": 5},
            {"user_id": "b", "play_count": 1},
            {"user_id": "b", "play_count": None},
            {"user_id": None, "play_count": 100},
        ]
        assert rank_creators(rows, 5) == [("b", 2, 1), ("a", 1, 5)]

    def test_limit(self):
        rows = [{"user_id": str(i)} for i in range(10)]
        assert len(rank_creators(rows, 3)) == 3


class TestDeletionSchedule:
    def test_days_remaining_round_up(self):
        now = datetime(2024, 1, 10, 12, tzinfo=timezone.utc)
        permanent, days = deletion_schedule("2024-01-01T00:00:00Z", now)

        assert permanent == datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert days == 21

    def test_never_negative(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        _, days = deletion_schedule("2024-01-01T00:00:00Z", now)
        assert days == 0


class TestBuildCategoryTree:
    def test_nests_children(self):
        rows = [
            {"id": "1", "name": "Science", "slug": "science"},
            {"id": "2", "name": "Physics", "slug": "physics", "parent_id": "1"},
            {"id": "3", "name": "Optics", "slug": "optics", "parent_id": "2"},
        ]
        roots = build_category_tree(rows)

        assert [r.slug for r in roots] == ["science"]
        assert roots[0].children[0].slug == "physics"
        assert roots[0].children[0].children[0].slug == "optics"

    def test_orphans_and_self_parents_become_roots(self):
        rows = [
            {"id": "1", "name": "A", "slug": "a", "parent_id": "missing"},
            {"id": "2", "name": "B", "slug": "b", "parent_id": "2"},
        ]
        assert [r.slug for r in build_category_tree(rows)] == ["a", "b"]


class TestValidateCommentBody:
    def test_trims(self):
        assert validate_comment_body("  nice post \n") == "nice post"

    @pytest.mark.parametrize("body", ["", "   ", "x" * (MAX_COMMENT_LENGTH + 1)])
    def test_rejects(self, body):
        with pytest.raises(HTTPException) as exc:
            validate_comment_body(body)
        assert exc.value.status_code == 400

    def test_max_length_is_allowed(self):
        assert len(validate_comment_body("x" * MAX_COMMENT_LENGTH)) == MAX_COMMENT_LENGTH
