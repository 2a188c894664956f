from pydantic import AfterValidator, BaseModel, Field, model_validator
from typing import Annotated, Optional, List, Literal
from datetime import datetime
from app.modules.laags.constants import LAAG_TYPES
from app.modules.profiles.schemas import ProfileCard
from app.modules.images.schemas import ImageResponse
from app.modules.comments.schemas import CommentResponse

Privacy = Literal["public", "group-only"]
Status = Literal["Planning", "Completed", "Cancelled"]


def _check_type(value: str) -> str:
    if value not in LAAG_TYPES:
        raise ValueError(f"Unknown laag type: {value}")
    return value


LaagType = Annotated[str, AfterValidator(_check_type)]


class LaagCreate(BaseModel):
    what: str = Field(..., min_length=1, max_length=25)
    where: str = Field(..., min_length=1, max_length=50)
    why: Optional[str] = Field(default=None, max_length=250)
    type: LaagType
    estimated_cost: float = Field(..., ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    status: Literal["Planning", "Completed"] = "Planning"
    when_start: datetime
    when_end: datetime
    fun_meter: Optional[float] = Field(default=None, ge=0, le=10)
    privacy: Privacy = "group-only"
    attendees: List[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_dates(self):
        if self.when_end < self.when_start:
            raise ValueError("when_end must not be before when_start")
        return self


class LaagUpdate(BaseModel):
    """Edit form; only fields that are sent are written. attendees is the full target set."""
    what: Optional[str] = Field(default=None, min_length=1, max_length=25)
    where: Optional[str] = Field(default=None, min_length=1, max_length=50)
    why: Optional[str] = Field(default=None, max_length=250)
    type: Optional[LaagType] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    status: Optional[Status] = None
    when_start: Optional[datetime] = None
    when_end: Optional[datetime] = None
    fun_meter: Optional[float] = Field(default=None, ge=0, le=10)
    privacy: Optional[Privacy] = None
    attendees: Optional[List[str]] = Field(default=None, min_length=1)


class LaagComplete(BaseModel):
    actual_cost: float = Field(..., ge=0)
    fun_meter: float = Field(..., ge=0, le=10)
    attendees: Optional[List[str]] = Field(default=None, min_length=1)
    privacy: Optional[Privacy] = None
    type: Optional[LaagType] = None


class AttendeeResponse(BaseModel):
    id: str
    attendee_id: str
    profile: Optional[ProfileCard] = None


class LaagResponse(BaseModel):
    id: str
    what: str
    where: str
    why: Optional[str] = None
    type: Optional[str] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    status: str
    privacy: str
    when_start: Optional[datetime] = None
    when_end: Optional[datetime] = None
    fun_meter: Optional[float] = None
    organizer: str
    organizer_profile: Optional[ProfileCard] = None
    group_id: str
    group_name: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attendees: List[AttendeeResponse] = []
    images: List[ImageResponse] = []
    comments: List[CommentResponse] = []

    class Config:
        from_attributes = True
