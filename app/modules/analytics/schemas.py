from pydantic import BaseModel
from typing import Optional


class OverviewStats(BaseModel):
    total_users: int = 0
    total_activities: int = 0
    public_activities: int = 0
    total_plays: int = 0
    users_this_week: int = 0
    users_this_month: int = 0
    activities_this_week: int = 0
    activities_this_month: int = 0
    avg_plays_per_activity: int = 0


class GrowthDataPoint(BaseModel):
    date: str
    count: int


class TypeDistribution(BaseModel):
    type: str
    count: int
    percentage: int


class StatusDistribution(BaseModel):
    status: str
    count: int
    percentage: int


class RoleDistribution(BaseModel):
    role: str
    count: int
    percentage: int


class TopCreator(BaseModel):
    id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    activity_count: int
    total_plays: int


class TopActivity(BaseModel):
    id: str
    title: str
    thumbnail: Optional[str] = None
    type: Optional[str] = None
    play_count: int = 0
    creator_name: Optional[str] = None
