from pydantic import BaseModel, field_validator
from typing import List
from datetime import datetime


class MessageCreate(BaseModel):
    receiver_id: str
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        return value


class MessageResponse(BaseModel):
    id: int
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    friend_id: str
    messages: List[MessageResponse]
    next_cursor: int
