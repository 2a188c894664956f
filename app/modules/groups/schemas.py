from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.modules.profiles.schemas import ProfileCard


class GroupUpdate(BaseModel):
    group_name: str = Field(..., min_length=1)


class GroupResponse(BaseModel):
    id: str
    group_name: str
    group_picture: Optional[str] = None
    group_picture_url: Optional[str] = None
    no_members: int = 0
    owner: str
    owner_profile: Optional[ProfileCard] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupMemberAdd(BaseModel):
    profile_id: str


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    group_member: str
    is_removed: bool = False
    created_at: Optional[datetime] = None
    profile: Optional[ProfileCard] = None

    class Config:
        from_attributes = True


class GroupDetailResponse(GroupResponse):
    members: List[GroupMemberResponse] = []
    member_count: int = 0
