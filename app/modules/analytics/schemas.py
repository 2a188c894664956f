from pydantic import BaseModel
from typing import List, Optional


class LeaderboardEntry(BaseModel):
    rank: int
    profile_id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    laag_count: int


class LeaderboardResponse(BaseModel):
    entries: List[LeaderboardEntry]
    total: int
    has_more: bool


class SeriesPoint(BaseModel):
    time: str
    value: float


class DistributionItem(BaseModel):
    name: str
    value: int


class GroupAnalyticsResponse(BaseModel):
    group_id: str
    period: str
    activity: List[SeriesPoint]
    spending: List[SeriesPoint]
    types: List[DistributionItem]
    statuses: List[DistributionItem]


class GroupLaagStats(BaseModel):
    group_id: str
    group_name: str
    planning_count: int = 0
    completed_count: int = 0
    cancelled_count: int = 0


class DashboardResponse(BaseModel):
    period: str
    user_count: int
    group_count: int
    laag_counts: dict
    groups: List[GroupLaagStats]
