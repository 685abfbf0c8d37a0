from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.reports.schemas import (
    ReportCreate, ReportSubmitted, ReportsPage, ReportStatusUpdate, ReportStats, ReportStatus
)
from app.modules.reports.service import ReportService
from app.core.dependencies import get_optional_user, require_admin
from supabase import Client
from typing import Optional, Dict

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_service_supabase)) -> ReportService:
    return ReportService(supabase)


@router.post("", response_model=ReportSubmitted, status_code=201)
async def submit_report(
    report: ReportCreate,
    viewer: Optional[Dict] = Depends(get_optional_user),
    service: ReportService = Depends(get_report_service)
):
    """Report an activity, profile or comment (guests allowed)"""
    return service.submit_report(report, viewer["id"] if viewer else None)


@router.get("", response_model=ReportsPage)
async def get_reports(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[ReportStatus] = None,
    user_data: Dict = Depends(require_admin),
    service: ReportService = Depends(get_report_service)
):
    return service.get_reports(page, page_size, status)


@router.get("/stats", response_model=ReportStats)
async def get_report_stats(
    user_data: Dict = Depends(require_admin),
    service: ReportService = Depends(get_report_service)
):
    return service.get_report_stats()


@router.put("/{report_id}/status")
async def update_report_status(
    report_id: str,
    request: ReportStatusUpdate,
    user_data: Dict = Depends(require_admin),
    service: ReportService = Depends(get_report_service)
):
    """Review a report; stamps the reviewer and review time"""
    service.update_report_status(report_id, request.status, user_data["id"], request.admin_notes)
    return {"success": True}
