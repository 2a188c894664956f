from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.modules.profiles.schemas import ProfileCard


class NotificationResponse(BaseModel):
    """One read row of the caller joined with what the dropdown shows"""
    id: str
    notification_id: str
    is_read: bool = False
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    laag_id: Optional[str] = None
    group_id: Optional[str] = None
    laag_status: Optional[str] = None
    group_name: Optional[str] = None
    laag_what: Optional[str] = None
    laag_privacy: Optional[str] = None
    organizer_name: Optional[str] = None
    route: Optional[str] = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int


class NotificationHistoryItem(BaseModel):
    id: str
    laag_id: str
    group_id: str
    laag_status: str
    created_at: Optional[datetime] = None
    laag_what: Optional[str] = None
    group_name: Optional[str] = None
    organizer: Optional[ProfileCard] = None
