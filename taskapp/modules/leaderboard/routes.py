from fastapi import APIRouter, Depends, Query
from taskapp.config import settings
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.leaderboard.schemas import LeaderboardEntry, DirectoryEntry
from taskapp.modules.leaderboard.service import LeaderboardService
from taskapp.core.dependencies import SessionContext, get_session_context
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["leaderboard"])


def get_leaderboard_service(supabase: Client = Depends(get_supabase)) -> LeaderboardService:
    return LeaderboardService(supabase)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(
    limit: Optional[int] = Query(None, ge=1),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """Top players by score"""
    return service.leaderboard(limit or settings.leaderboard_default_limit)


@router.get("/players", response_model=List[LeaderboardEntry])
async def players(
    session: SessionContext = Depends(get_session_context),
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """All players except the caller, ranked (friend picker and messaging list)"""
    return service.players(session.user_id)


@router.get("/users", response_model=List[DirectoryEntry])
async def user_directory(
    service: LeaderboardService = Depends(get_leaderboard_service)
):
    """Profile directory sorted by last activity"""
    return service.directory()
