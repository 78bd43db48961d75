from pydantic import BaseModel, BeforeValidator, field_validator
from typing import Annotated, Optional
from datetime import datetime


def _null_as_zero(value):
    return 0 if value is None else value


Counter = Annotated[int, BeforeValidator(_null_as_zero)]


class ProfileUpdate(BaseModel):
    username: str

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be empty")
        return value


class ProfileCard(BaseModel):
    """The {username, avatar_url} slice joined onto tasks, notifications and messages"""
    user_id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileResponse(BaseModel):
    user_id: str
    username: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    score: Counter = 0
    completed_challenges: Counter = 0
    last_active: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.username.strip())
