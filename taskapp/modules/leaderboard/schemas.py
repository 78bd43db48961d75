from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    score: int = 0
    completed_challenges: int = 0


class DirectoryEntry(BaseModel):
    user_id: str
    username: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    score: int = 0
    last_active: Optional[datetime] = None
