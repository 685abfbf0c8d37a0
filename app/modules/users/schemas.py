from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

UserRole = Literal["user", "plus", "pro", "ultra", "admin"]


class AdminUserResponse(BaseModel):
    id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = "user"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    activity_count: int = 0

    class Config:
        from_attributes = True


class UsersPage(BaseModel):
    users: List[AdminUserResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class UserDetailStats(BaseModel):
    activity_count: int = 0
    total_plays: int = 0
    reports_count: int = 0
    reports_against_count: int = 0


class UserDetails(BaseModel):
    profile: Dict[str, Any]
    activities: List[Dict[str, Any]]
    stats: UserDetailStats


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserOverviewStats(BaseModel):
    total: int = 0
    user: int = 0
    plus: int = 0
    pro: int = 0
    ultra: int = 0
    admin: int = 0
    this_week: int = 0
    this_month: int = 0
    pending_deletion: int = 0


class PendingDeletion(BaseModel):
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    deleted_at: datetime
    permanent_deletion_date: datetime
    days_remaining: int
