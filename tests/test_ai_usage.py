"""
Tests for AI usage statistics and log cleanup.
"""

from datetime import date, datetime, timezone

import pytest
from fastapi import HTTPException

from app.modules.settings import usage
from app.modules.settings.usage import AIUsageService, monthly_points, usage_points


@pytest.fixture
def frozen_now(monkeypatch):
    now = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)
    monkeypatch.setattr(usage, "utc_now", lambda: now)
    return now


def log(created_at, action="summarize", input_tokens=100, output_tokens=50):
    return {
        "action": action,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "created_at": created_at,
    }


class TestAggregation:
    def test_usage_points_zero_fill_and_skip_out_of_range(self):
        points = usage_points([
            log("2024-03-09T23:59:00Z"),
            log("2024-03-10T00:01:00+00:00"),
            log("2024-03-10T12:00:00Z"),
            log("2024-03-01T12:00:00Z"),
        ], 3, date(2024, 3, 10))

        assert [(p.date, p.requests, p.tokens) for p in points] == [
            ("2024-03-08", 0, 0),
            ("2024-03-09", 1, 150),
            ("2024-03-10", 2, 300),
        ]

    def test_monthly_points(self):
        points = usage_points([log("2024-02-29T10:00:00Z"), log("2024-03-01T10:00:00Z")], 3, date(2024, 3, 1))

        months = monthly_points(points)

        assert [(m.date, m.requests) for m in months] == [("2024-02", 1), ("2024-03", 1)]


class TestUsageStats:
    def test_every_action_is_reported(self, supabase):
        supabase.queue("ai_usage_logs", [
            log("2024-03-10T08:00:00Z", "craft", 1_000_000, 0),
            log("2024-03-10T09:00:00Z", "craft", 0, 1_000_000),
            log("2024-03-11T09:00:00Z", "translate", 10, 5),
        ])

        stats = AIUsageService(supabase).get_ai_usage_stats(30)

        assert stats.total_requests == 3
        assert stats.total_tokens == 2_000_015
        assert stats.requests_by_action["craft"] == 2
        assert stats.requests_by_action["deep_lesson"] == 0
        assert stats.tokens_by_action["translate"] == 15
        assert [(p.date, p.requests) for p in stats.daily_usage] == [("2024-03-10", 2), ("2024-03-11", 1)]
        assert stats.estimated_cost == 0.5

    def test_week_chart(self, supabase, frozen_now):
        supabase.queue("ai_usage_logs", [log("2024-03-15T01:00:00Z"), log("2024-03-09T10:00:00Z")])

        chart = AIUsageService(supabase).get_daily_ai_usage_chart("week")

        assert len(chart.data) == 7
        assert chart.data[0].date == "2024-03-09"
        assert chart.data[-1].tokens == 150
        assert chart.summary.total_requests == 2
        calls = supabase.queries("ai_usage_logs")[0]
        assert supabase.args_of(calls, "gte") == [("created_at", "2024-03-09T00:00:00+00:00")]

    def test_year_chart_is_monthly(self, supabase, frozen_now):
        supabase.queue("ai_usage_logs", [log("2024-01-20T01:00:00Z"), log("2024-03-02T01:00:00Z")])

        chart = AIUsageService(supabase).get_daily_ai_usage_chart("year")

        assert all(len(point.date) == 7 for point in chart.data)
        assert chart.data[-1].date == "2024-03"
        assert [p.date for p in chart.data] == sorted(p.date for p in chart.data)
        assert chart.summary.total_tokens == 300

    def test_today_counts_since_utc_midnight(self, supabase, frozen_now):
        supabase.queue("ai_usage_logs", [{"total_tokens": 40}, {"total_tokens": 2}], count=2)

        today = AIUsageService(supabase).get_today_ai_usage()

        assert (today.requests, today.tokens) == (2, 42)
        calls = supabase.queries("ai_usage_logs")[0]
        assert supabase.args_of(calls, "gte") == [("created_at", "2024-03-15T00:00:00+00:00")]

    def test_current_month(self, supabase, frozen_now):
        supabase.queue("ai_usage_logs", [{"total_tokens": 10}, {"total_tokens": None}])

        month = AIUsageService(supabase).get_current_month_ai_usage()

        assert month.month_name == "Mar 2024"
        assert (month.requests, month.tokens) == (2, 10)
        calls = supabase.queries("ai_usage_logs")[0]
        assert supabase.args_of(calls, "gte") == [("created_at", "2024-03-01T00:00:00+00:00")]


class TestClearLogs:
    def test_requires_positive_days(self, supabase):
        with pytest.raises(HTTPException) as exc:
            AIUsageService(supabase).clear_old_ai_usage_logs(0)
        assert exc.value.status_code == 400

    def test_deletes_older_rows(self, supabase, frozen_now):
        supabase.queue("ai_usage_logs", [{"id": "l1"}, {"id": "l2"}])

        result = AIUsageService(supabase).clear_old_ai_usage_logs(30)

        assert result.deleted == 2
        calls = supabase.queries("ai_usage_logs")[0]
        assert supabase.args_of(calls, "lt") == [("created_at", "2024-02-14T09:30:00+00:00")]
