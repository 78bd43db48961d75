from supabase import Client
from taskapp.config import settings
from taskapp.core.errors import persistence_error
from taskapp.modules.profiles.schemas import ProfileResponse, ProfileCard
from taskapp.modules.storage.service import StorageService
from typing import Dict, Iterable, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CARD_COLUMNS = "user_id, username, avatar_url"


def _match_counter(query, column: str, value):
    if value is None:
        return query.is_(column, "null")
    return query.eq(column, value)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def find_profile(self, user_id: str) -> Optional[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading profile")
        if not result or not result.data:
            return None
        return ProfileResponse(**result.data)

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by user id"""
        profile = self.find_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def ensure_profile(self, user_id: str, email: Optional[str] = None) -> ProfileResponse:
        """Return the caller's profile, creating an empty one on first sign-in"""
        profile = self.find_profile(user_id)
        if profile is not None:
            return profile
        try:
            result = self.supabase.table("profiles").insert({
                "user_id": user_id,
                "score": 0,
                "completed_challenges": 0,
                "last_active": datetime.now(timezone.utc).isoformat(),
                "name": email,
                "avatar_url": None,
            }).execute()
        except Exception as e:
            raise persistence_error(e, "Creating profile")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create profile")
        logger.info(f"Created profile for {user_id}")
        return ProfileResponse(**result.data[0])

    def get_profile_cards(self, user_ids: Iterable[str]) -> Dict[str, ProfileCard]:
        """Resolve user ids to {username, avatar_url}; unknown ids are simply absent"""
        ids = list({uid for uid in user_ids if uid})
        if not ids:
            return {}
        try:
            result = self.supabase.table("profiles")\
                .select(CARD_COLUMNS)\
                .in_("user_id", ids)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading profiles")
        return {row["user_id"]: ProfileCard(**row) for row in (result.data or [])}

    def update_username(self, user_id: str, username: str) -> ProfileResponse:
        return self._update(user_id, {"username": username})

    def upload_avatar(
        self,
        user_id: str,
        storage: StorageService,
        filename: str,
        file_content: bytes,
        content_type: str,
    ) -> ProfileResponse:
        """Upload a new profile picture, then point avatar_url at it"""
        url = storage.upload(settings.avatar_bucket, user_id, filename, file_content, content_type)
        return self._update(user_id, {"avatar_url": url})

    def _update(self, user_id: str, update_data: dict) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Updating profile")
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**result.data[0])

    def _read_counters(self, user_id: str) -> dict:
        try:
            result = self.supabase.table("profiles")\
                .select("score, completed_challenges")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading profile")
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data

    def credit_completion(self, user_id: str, points: int) -> ProfileResponse:
        """
        Add a finished task's points to the profile and count one more completed challenge.

        The write only applies if score and completed_challenges still hold the values
        we read (NULL counts as 0 but is matched as NULL), so two completions landing
        at once cannot overwrite each other. A lost race is re-read a bounded number
        of times and then reported as retryable.
        """
        for attempt in range(1, settings.score_update_attempts + 1):
            counters = self._read_counters(user_id)
            score = counters.get("score")
            completed = counters.get("completed_challenges")
            try:
                query = self.supabase.table("profiles")\
                    .update({
                        "score": (score or 0) + points,
                        "completed_challenges": (completed or 0) + 1,
                    })\
                    .eq("user_id", user_id)
                query = _match_counter(query, "score", score)
                query = _match_counter(query, "completed_challenges", completed)
                result = query.execute()
            except Exception as e:
                raise persistence_error(e, "Crediting profile")
            if result.data:
                return ProfileResponse(**result.data[0])
            logger.warning(f"Score update for {user_id} lost a race (attempt {attempt})")
        raise HTTPException(
            status_code=503,
            detail="Profile is being updated concurrently, please retry",
            headers={"Retry-After": "1"},
        )
