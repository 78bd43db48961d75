from supabase import Client
from taskapp.core.errors import persistence_error
from taskapp.modules.leaderboard.schemas import LeaderboardEntry, DirectoryEntry
from taskapp.modules.profiles.schemas import ProfileResponse
from typing import List, Optional
from datetime import datetime, timezone

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def rank_profiles(profiles: List[ProfileResponse]) -> List[LeaderboardEntry]:
    """Highest score first; equal scores are ordered by user_id so ranks are stable."""
    ordered = sorted(profiles, key=lambda p: (-(p.score or 0), p.user_id))
    return [
        LeaderboardEntry(
            rank=position,
            user_id=p.user_id,
            username=p.username,
            avatar_url=p.avatar_url,
            score=p.score or 0,
            completed_challenges=p.completed_challenges or 0,
        )
        for position, p in enumerate(ordered, start=1)
    ]


def top_n(profiles: List[ProfileResponse], limit: int) -> List[LeaderboardEntry]:
    return rank_profiles(profiles)[:max(limit, 0)]


def players_excluding(profiles: List[ProfileResponse], user_id: str) -> List[LeaderboardEntry]:
    """Everyone but the caller, keeping their global rank"""
    return [entry for entry in rank_profiles(profiles) if entry.user_id != user_id]


def _last_active_key(profile: ProfileResponse) -> datetime:
    if profile.last_active is None:
        return _EPOCH
    if profile.last_active.tzinfo is None:
        return profile.last_active.replace(tzinfo=timezone.utc)
    return profile.last_active


class LeaderboardService:
    """Read-only views over the profiles table"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _load_profiles(self) -> List[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("user_id, username, name, avatar_url, score, completed_challenges, last_active")\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading profiles")
        return [ProfileResponse(**row) for row in (result.data or [])]

    def leaderboard(self, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        profiles = self._load_profiles()
        if limit is None:
            return rank_profiles(profiles)
        return top_n(profiles, limit)

    def players(self, user_id: str) -> List[LeaderboardEntry]:
        return players_excluding(self._load_profiles(), user_id)

    def directory(self) -> List[DirectoryEntry]:
        """Profiles, most recently active first"""
        profiles = sorted(self._load_profiles(), key=_last_active_key, reverse=True)
        return [
            DirectoryEntry(
                user_id=p.user_id,
                username=p.username,
                name=p.name,
                avatar_url=p.avatar_url,
                score=p.score or 0,
                last_active=p.last_active,
            )
            for p in profiles
        ]
