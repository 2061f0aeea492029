from pydantic import BaseModel
from typing import Optional, Dict
from datetime import datetime


class GroupReadResponse(BaseModel):
    group_id: str
    user_id: str
    last_read_at: datetime

    class Config:
        from_attributes = True


class UnreadCountsResponse(BaseModel):
    counts: Dict[str, int] = {}  # group_id -> unread, zero entries omitted
    total: int = 0
    error: Optional[str] = None
