"""
Thin wrapper over Supabase Auth.

Token lookups are not cached here; core.dependencies caches the whole session
context (user plus profile) per token.
"""

import hashlib
from supabase import Client
from taskapp.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, OAuthUrlResponse
from taskapp.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

SUPPORTED_OAUTH_PROVIDERS = {"google", "github"}


def token_cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _mentions(error: Exception, *fragments: str) -> bool:
    text = str(error).lower()
    return any(fragment in text for fragment in fragments)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Email/password sign-up; the profile row is created on first authenticated request"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
            })
        except Exception as e:
            if _mentions(e, "already registered", "already exists"):
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Sign-up failed for {register_data.email}: {e}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {e}")

        user = auth_response.user
        if not user:
            raise HTTPException(status_code=400, detail="Failed to register user")
        return RegisterResponse(
            user_id=user.id,
            email=user.email or register_data.email,
            message="User registered successfully",
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password,
            })
        except Exception as e:
            if _mentions(e, "invalid", "credentials"):
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {e}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email,
        )

    def oauth_url(self, provider: str) -> OAuthUrlResponse:
        """Start an OAuth sign-in; the client follows the returned provider URL"""
        if provider not in SUPPORTED_OAUTH_PROVIDERS:
            raise HTTPException(status_code=400, detail=f"Unsupported OAuth provider: {provider}")
        credentials = {"provider": provider}
        if settings.oauth_redirect_url:
            credentials["options"] = {"redirect_to": settings.oauth_redirect_url}
        try:
            response = self.supabase.auth.sign_in_with_oauth(credentials)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"OAuth sign-in failed: {e}")
        return OAuthUrlResponse(provider=provider, url=response.url)

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to {id, email}; any failure is a 401"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info(f"Token rejected: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        return {"id": user_response.user.id, "email": user_response.user.email}

    def logout(self) -> bool:
        # Access tokens are JWTs and stay valid until they expire
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False
