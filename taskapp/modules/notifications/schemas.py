from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from taskapp.modules.profiles.schemas import ProfileCard


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    sender_id: Optional[str] = None
    message: str
    is_read: bool = False
    created_at: datetime
    assignment_id: Optional[int] = None
    sender: Optional[ProfileCard] = None
    display_message: Optional[str] = None

    class Config:
        from_attributes = True


class NotificationFeedResponse(BaseModel):
    items: List[NotificationResponse]
    next_cursor: int


class ReviewTargetResponse(BaseModel):
    assignment_id: Optional[int] = None
    redirect_to: Optional[str] = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkReadResponse(BaseModel):
    updated: int
