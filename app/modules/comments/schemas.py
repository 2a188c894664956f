from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.modules.profiles.schemas import ProfileCard


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    comment: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: str
    laag_id: str
    user_id: str
    comment: str
    author: Optional[ProfileCard] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
