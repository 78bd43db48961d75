from fastapi import APIRouter, Depends
from taskapp.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    OAuthUrlResponse, SessionResponse
)
from taskapp.modules.auth.service import AuthService
from taskapp.core.dependencies import (
    SessionContext, get_auth_service, get_current_token, get_session_context, forget_token
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.get("/oauth/{provider}", response_model=OAuthUrlResponse)
async def oauth_sign_in(
    provider: str,
    service: AuthService = Depends(get_auth_service)
):
    """Get the provider URL to start an OAuth sign-in"""
    return service.oauth_url(provider)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and drop the cached session"""
    forget_token(token)
    service.logout()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=SessionResponse)
async def get_me(session: SessionContext = Depends(get_session_context)):
    """Current session, including whether the profile is complete (for frontend routing)"""
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        username=session.profile.username,
        avatar_url=session.profile.avatar_url,
        profile_complete=session.profile_complete,
    )
