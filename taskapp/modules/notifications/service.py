"""
Notification dispatch and presentation.

Dispatch is fire-and-forget from the caller's point of view: the lifecycle
transition that triggered it has already been stored, so an insert failure is
logged and swallowed. Consolidation happens when the feed is read, never when
rows are written.
"""

import re
from supabase import Client
from taskapp.config import settings
from taskapp.core.errors import persistence_error
from taskapp.modules.notifications.schemas import (
    NotificationResponse, NotificationFeedResponse, ReviewTargetResponse
)
from taskapp.modules.profiles.service import ProfileService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

NEW_MESSAGE_PREFIX = "New message received from"
NEW_MESSAGE_PATTERN = re.compile(r"^" + re.escape(NEW_MESSAGE_PREFIX) + r"\b")
REVIEW_PATH = "/reviewSubmissions?assignment_id={assignment_id}"


def is_message_notification(notification: NotificationResponse) -> bool:
    return notification.assignment_id is None and bool(NEW_MESSAGE_PATTERN.match(notification.message or ""))


def consolidate(notifications: List[NotificationResponse]) -> List[NotificationResponse]:
    """Collapse "new message" rows to the latest one per sender; newest first."""
    ordered = sorted(notifications, key=lambda n: (n.created_at, n.id), reverse=True)
    seen_senders = set()
    consolidated = []
    for notification in ordered:
        if is_message_notification(notification):
            if notification.sender_id in seen_senders:
                continue
            seen_senders.add(notification.sender_id)
        consolidated.append(notification)
    return consolidated


def render_message(notification: NotificationResponse) -> str:
    if notification.assignment_id and notification.sender and notification.sender.username:
        return f"You have a task to review from {notification.sender.username}."
    return notification.message


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)

    def dispatch(
        self,
        recipient_id: str,
        sender_id: Optional[str],
        message: str,
        assignment_id: Optional[int] = None,
    ) -> Optional[NotificationResponse]:
        """Append one notification row. Returns None (after a warning) if the insert fails."""
        payload = {
            "user_id": recipient_id,
            "sender_id": sender_id,
            "message": message,
            "is_read": False,
        }
        if assignment_id is not None:
            payload["assignment_id"] = assignment_id
        try:
            result = self.supabase.table("notifications").insert(payload).execute()
        except Exception as e:
            logger.warning(f"Notification to {recipient_id} not delivered: {e}")
            return None
        if not result.data:
            logger.warning(f"Notification to {recipient_id} not delivered: empty insert result")
            return None
        return NotificationResponse(**result.data[0])

    def _attach_senders(self, notifications: List[NotificationResponse]) -> List[NotificationResponse]:
        cards = self.profiles.get_profile_cards(n.sender_id for n in notifications)
        for notification in notifications:
            notification.sender = cards.get(notification.sender_id)
            notification.display_message = render_message(notification)
        return notifications

    def list_for_user(self, user_id: str) -> List[NotificationResponse]:
        """Consolidated feed for the recipient; viewing it marks everything read"""
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading notifications")
        notifications = [NotificationResponse(**row) for row in (result.data or [])]
        notifications = consolidate(self._attach_senders(notifications))
        try:
            self.mark_all_read(user_id)
        except HTTPException as e:
            logger.error(f"Error marking notifications as read for {user_id}: {e.detail}")
        return notifications

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the user as read; safe to repeat"""
        try:
            result = self.supabase.table("notifications")\
                .update({"is_read": True})\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Marking notifications read")
        return len(result.data or [])

    def unread_count(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Counting notifications")
        return len(result.data or [])

    def feed(self, user_id: str, since: int = 0, limit: Optional[int] = None) -> NotificationFeedResponse:
        """
        Notifications created after the cursor, oldest first.

        Clients fetch once, then keep polling or re-subscribe from next_cursor, so a
        row inserted between the initial fetch and the subscription is not lost.
        """
        limit = limit or settings.feed_page_limit
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .gt("id", since)\
                .order("id")\
                .limit(limit)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading notification feed")
        items = self._attach_senders([NotificationResponse(**row) for row in (result.data or [])])
        next_cursor = items[-1].id if items else since
        return NotificationFeedResponse(items=items, next_cursor=next_cursor)

    def get_notification(self, notification_id: int) -> NotificationResponse:
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("id", notification_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Loading notification")
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
        return NotificationResponse(**result.data)

    def _get_owned(self, notification_id: int, user_id: str) -> NotificationResponse:
        notification = self.get_notification(notification_id)
        if notification.user_id != user_id:
            raise HTTPException(status_code=403, detail="Not your notification")
        return notification

    def delete(self, notification_id: int, user_id: str) -> bool:
        """Delete notification"""
        self._get_owned(notification_id, user_id)
        return self._delete_row(notification_id)

    def _delete_row(self, notification_id: int) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Deleting notification")
        return len(result.data or []) > 0

    def review(self, notification_id: int, user_id: str) -> ReviewTargetResponse:
        """
        Consume a "review this submission" notification.

        The row is deleted before the reviewer acts, so abandoning the review
        loses the reminder; the submission itself stays in the review queue.
        """
        notification = self._get_owned(notification_id, user_id)
        self._delete_row(notification_id)
        if notification.assignment_id is None:
            return ReviewTargetResponse()
        return ReviewTargetResponse(
            assignment_id=notification.assignment_id,
            redirect_to=REVIEW_PATH.format(assignment_id=notification.assignment_id),
        )
