"""
Core dependencies: who is calling, and whether their profile is ready for social features.

The session context is resolved from the bearer token once and cached for the
session TTL, so the profile-completeness check is not repeated on every request.
Updating the profile drops the cached entry.
"""

import time
from dataclasses import dataclass
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from taskapp.config import settings
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.auth.service import AuthService, token_cache_key
from taskapp.modules.profiles.schemas import ProfileResponse
from taskapp.modules.profiles.service import ProfileService
from taskapp.modules.storage.service import StorageService, create_storage
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

_SESSION_CACHE: Dict[str, tuple] = {}
_SESSION_CACHE_MAX_SIZE = 500


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    email: Optional[str]
    profile: ProfileResponse
    profile_complete: bool

    @property
    def display_name(self) -> str:
        return self.profile.username or "Unknown"


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def build_session_context(user_data: dict, profile_service: ProfileService) -> SessionContext:
    profile = profile_service.ensure_profile(user_data["id"], user_data.get("email"))
    return SessionContext(
        user_id=user_data["id"],
        email=user_data.get("email"),
        profile=profile,
        profile_complete=profile.is_complete,
    )


def get_session_context(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
) -> SessionContext:
    """Resolve the caller's session, ensuring their profile row exists"""
    cache_key = token_cache_key(token)
    now = time.monotonic()
    cached = _SESSION_CACHE.get(cache_key)
    if cached is not None:
        context, expiry = cached
        if now < expiry:
            return context
        del _SESSION_CACHE[cache_key]

    user_data = auth_service.get_current_user(token)
    context = build_session_context(user_data, ProfileService(supabase))
    if len(_SESSION_CACHE) < _SESSION_CACHE_MAX_SIZE:
        _SESSION_CACHE[cache_key] = (context, now + settings.session_cache_ttl_seconds)
    return context


def invalidate_session(user_id: str) -> None:
    """Forget cached contexts for a user so the next request re-reads their profile"""
    stale = [key for key, (context, _) in _SESSION_CACHE.items() if context.user_id == user_id]
    for key in stale:
        del _SESSION_CACHE[key]


def forget_token(token: str) -> None:
    _SESSION_CACHE.pop(token_cache_key(token), None)


def require_complete_profile(
    session: SessionContext = Depends(get_session_context)
) -> SessionContext:
    """Social features (assigning, messaging) need a username first"""
    if not session.profile_complete:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Complete your profile (set a username) before using social features"
        )
    return session


def get_storage(supabase: Client = Depends(get_supabase)) -> StorageService:
    return create_storage(supabase)
