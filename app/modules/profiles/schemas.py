from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileCard(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None
    is_darkmode: Optional[bool] = None
    is_allow_notifications: Optional[bool] = None


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    is_deleted: bool = False
    is_darkmode: bool = False
    is_allow_notifications: bool = True
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvatarUploadResponse(BaseModel):
    avatar_url: str
    signed_url: Optional[str] = None
