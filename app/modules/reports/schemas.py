from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

ReportReason = Literal["inappropriate", "spam", "copyright", "misinformation", "harassment", "other"]
ReportStatus = Literal["pending", "reviewed", "resolved", "dismissed"]
ReportContentType = Literal["activity", "profile", "comment"]


class ReportCreate(BaseModel):
    content_type: ReportContentType = "activity"
    content_id: str
    reason: ReportReason
    additional_info: Optional[str] = Field(default=None, max_length=2000)


class ReportSubmitted(BaseModel):
    report_id: str
    success: bool = True


class ReportResponse(BaseModel):
    id: str
    content_type: ReportContentType
    content_id: str
    reporter_id: Optional[str] = None
    reason: ReportReason
    additional_info: Optional[str] = None
    status: ReportStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    reporter: Optional[Dict[str, Any]] = None
    target: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class ReportsPage(BaseModel):
    reports: List[ReportResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class ReportStatusUpdate(BaseModel):
    status: ReportStatus
    admin_notes: Optional[str] = None


class ReportStats(BaseModel):
    pending: int = 0
    reviewed: int = 0
    resolved: int = 0
    dismissed: int = 0
    total: int = 0
