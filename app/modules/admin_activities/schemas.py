from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

ActivityStatus = Literal["draft", "private_group", "link", "public"]


class AdminActivity(BaseModel):
    id: str
    title: str
    thumbnail: Optional[str] = None
    type: Optional[str] = None
    status: ActivityStatus
    play_count: int = 0
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None
    creator: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class AdminActivitiesPage(BaseModel):
    activities: List[AdminActivity]
    total: int
    page: int
    page_size: int
    has_more: bool


class AdminActivityStats(BaseModel):
    total: int = 0
    public: int = 0
    draft: int = 0
    private_group: int = 0
    link: int = 0
    quiz: int = 0
    quest: int = 0
    lesson: int = 0
    this_week: int = 0
    this_month: int = 0


class ActivityStatusUpdate(BaseModel):
    status: ActivityStatus
