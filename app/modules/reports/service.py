import logging
from collections import defaultdict
from supabase import Client
from app.core.utils import page_range, utc_now_iso, index_by
from app.modules.reports.models import REPORT_STATUSES, REPORT_TARGETS
from app.modules.reports.schemas import (
    ReportCreate, ReportSubmitted, ReportResponse, ReportsPage, ReportStats
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def submit_report(self, report: ReportCreate, reporter_id: Optional[str] = None) -> ReportSubmitted:
        """Guests may report too; their reporter_id stays null"""
        try:
            result = self.supabase.table("reports").insert({
                "content_type": report.content_type,
                "content_id": report.content_id,
                "reporter_id": reporter_id,
                "reason": report.reason,
                "additional_info": report.additional_info or None,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to submit report")
            logger.info(f"Report submitted for {report.content_type} {report.content_id}")
            return ReportSubmitted(report_id=result.data[0]["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to submit report: {str(e)}")

    def _attach_related(self, reports: List[Dict[str, Any]]) -> None:
        """Attach reporter profiles and the reported rows"""
        reporter_ids = list({r["reporter_id"] for r in reports if r.get("reporter_id")})
        reporters = {}
        if reporter_ids:
            profiles = self.supabase.table("profiles")\
                .select("id, display_name, avatar_url")\
                .in_("id", reporter_ids)\
                .execute()
            reporters = index_by(profiles.data or [])

        ids_by_type = defaultdict(set)
        for report in reports:
            ids_by_type[report["content_type"]].add(report["content_id"])
        targets = {}
        for content_type, ids in ids_by_type.items():
            if content_type not in REPORT_TARGETS:
                continue
            table, columns = REPORT_TARGETS[content_type]
            rows = self.supabase.table(table)\
                .select(columns)\
                .in_("id", list(ids))\
                .execute()
            for row in rows.data or []:
                targets[(content_type, row["id"])] = row

        for report in reports:
            report["reporter"] = reporters.get(report.get("reporter_id"))
            report["target"] = targets.get((report["content_type"], report["content_id"]))

    def get_reports(self, page: int = 1, page_size: int = 20, status: Optional[str] = None) -> ReportsPage:
        try:
            query = self.supabase.table("reports").select("*", count="exact")
            if status:
                query = query.eq("status", status)
            start, end = page_range(page, page_size)
            result = query\
                .order("created_at", desc=True)\
                .range(start, end)\
                .execute()
            reports = result.data or []
            total = result.count or 0
            self._attach_related(reports)
            return ReportsPage(
                reports=[ReportResponse(**row) for row in reports],
                total=total,
                page=page,
                page_size=page_size,
                has_more=start + len(reports) < total,
            )
        except Exception as e:
            logger.error(f"Failed to fetch reports: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch reports: {str(e)}")

    def update_report_status(
        self,
        report_id: str,
        status: str,
        reviewer_id: str,
        admin_notes: Optional[str] = None
    ) -> bool:
        try:
            now = utc_now_iso()
            values: Dict[str, Any] = {
                "status": status,
                "reviewed_by": reviewer_id,
                "reviewed_at": now,
                "updated_at": now,
            }
            if admin_notes is not None:
                values["admin_notes"] = admin_notes
            result = self.supabase.table("reports")\
                .update(values)\
                .eq("id", report_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Report not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update report: {str(e)}")

    def get_report_stats(self) -> ReportStats:
        try:
            counts = {}
            for status in REPORT_STATUSES:
                result = self.supabase.table("reports")\
                    .select("id", count="exact", head=True)\
                    .eq("status", status)\
                    .execute()
                counts[status] = result.count or 0
            return ReportStats(**counts, total=sum(counts.values()))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch report stats: {str(e)}")
