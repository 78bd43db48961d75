from fastapi import APIRouter, Depends
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.notifications.schemas import (
    NotificationResponse, NotificationFeedResponse, ReviewTargetResponse,
    UnreadCountResponse, MarkReadResponse
)
from taskapp.modules.notifications.service import NotificationService
from taskapp.core.dependencies import SessionContext, get_session_context
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    """Consolidated notification list; opening it marks all notifications read"""
    return service.list_for_user(session.user_id)


@router.get("/feed", response_model=NotificationFeedResponse)
async def notification_feed(
    since: int = 0,
    limit: Optional[int] = None,
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    """Notifications newer than the `since` cursor"""
    return service.feed(session.user_id, since=since, limit=limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountResponse(unread=service.unread_count(session.user_id))


@router.post("/read", response_model=MarkReadResponse)
async def mark_all_read(
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    return MarkReadResponse(updated=service.mark_all_read(session.user_id))


@router.post("/{notification_id}/review", response_model=ReviewTargetResponse)
async def review_notification(
    notification_id: int,
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    """Consume a review notification and get the review page to open"""
    return service.review(notification_id, session.user_id)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: int,
    session: SessionContext = Depends(get_session_context),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete(notification_id, session.user_id)
    return None
