from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ImageResponse(BaseModel):
    id: str
    laag_id: str
    image: str
    url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
