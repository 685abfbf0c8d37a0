"""
Tests for content reports and their moderation.
"""

import pytest
from fastapi import HTTPException

from app.modules.reports.schemas import ReportCreate
from app.modules.reports.service import ReportService


class TestSubmitReport:
    def test_guest_report(self, supabase):
        supabase.queue("reports", [{"id": "r1"}])
        submitted = ReportService(supabase).submit_report(
            ReportCreate(content_id="a1", reason="spam", additional_info="")
        )

        values = supabase.args_of(supabase.queries("reports")[0], "insert")[0][0]
        assert submitted.report_id == "r1"
        assert values["content_type"] == "activity"
        assert values["reporter_id"] is None
        assert values["additional_info"] is None


class TestModeration:
    def test_reports_carry_reporter_and_target(self, supabase):
        supabase.queue("reports", [
            {"id": "r1", "content_type": "activity", "content_id": "a1", "reporter_id": "u1",
             "reason": "spam", "status": "pending"},
            {"id": "r2", "content_type": "comment", "content_id": "c1", "reporter_id": None,
             "reason": "harassment", "status": "pending"},
        ], count=3)
        supabase.queue("profiles", [{"id": "u1", "display_name": "Ann"}])
        supabase.queue("activities", [{"id": "a1", "title": "Fractions"}])
        supabase.queue("comments", [{"id": "c1", "body": "rude"}])

        page = ReportService(supabase).get_reports(page=1, page_size=2)

        assert page.reports[0].reporter == {"id": "u1", "display_name": "Ann"}
        assert page.reports[0].target["title"] == "Fractions"
        assert page.reports[1].reporter is None
        assert page.reports[1].target["body"] == "rude"
        assert page.has_more

    def test_review_stamps_reviewer(self, supabase):
        supabase.queue("reports", [{"id": "r1"}])
        ReportService(supabase).update_report_status("r1", "resolved", "admin-1", "Removed")

        values = supabase.args_of(supabase.queries("reports")[0], "update")[0][0]
        assert values["reviewed_by"] == "admin-1"
        assert values["admin_notes"] == "Removed"
        assert values["reviewed_at"]

    def test_review_missing_report(self, supabase):
        with pytest.raises(HTTPException) as exc:
            ReportService(supabase).update_report_status("r404", "dismissed", "admin-1")
        assert exc.value.status_code == 404

    def test_stats_total(self, supabase):
        for count in (3, 1, 2, 0):
            supabase.queue("reports", count=count)

        stats = ReportService(supabase).get_report_stats()
        assert (stats.pending, stats.resolved, stats.total) == (3, 2, 6)
