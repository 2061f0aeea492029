from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class GroupCreate(BaseModel):
    name: str


class GroupResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class GroupListResponse(BaseModel):
    items: List[GroupResponse] = []
    error: Optional[str] = None


class GroupMembersAdd(BaseModel):
    user_ids: List[str]


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupMemberListResponse(BaseModel):
    items: List[GroupMemberResponse] = []
    error: Optional[str] = None


class MessageCreate(BaseModel):
    content: str


class MessageResponse(BaseModel):
    id: str
    group_id: str
    sender_id: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class MessageListResponse(BaseModel):
    items: List[MessageResponse] = []
    error: Optional[str] = None
