from supabase import Client
from taskapp.core.errors import persistence_error
from taskapp.modules.messages.schemas import MessageCreate, MessageResponse, ConversationResponse
from taskapp.modules.notifications.service import NotificationService, NEW_MESSAGE_PREFIX
from taskapp.modules.profiles.service import ProfileService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        supabase: Client,
        notifications: Optional[NotificationService] = None,
        profiles: Optional[ProfileService] = None,
    ):
        self.supabase = supabase
        self.notifications = notifications or NotificationService(supabase)
        self.profiles = profiles or ProfileService(supabase)

    def send(self, sender_id: str, sender_name: str, message_data: MessageCreate) -> MessageResponse:
        """Store a direct message, then notify the receiver"""
        if message_data.receiver_id == sender_id:
            raise HTTPException(status_code=400, detail="You cannot message yourself")
        self.profiles.get_profile(message_data.receiver_id)
        try:
            result = self.supabase.table("messages").insert({
                "sender_id": sender_id,
                "receiver_id": message_data.receiver_id,
                "content": message_data.content,
            }).execute()
        except Exception as e:
            raise persistence_error(e, "Sending message")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to send message")

        self.notifications.dispatch(
            message_data.receiver_id,
            sender_id,
            f"{NEW_MESSAGE_PREFIX} {sender_name}",
        )
        return MessageResponse(**result.data[0])

    def _direction(self, sender_id: str, receiver_id: str, since: int) -> List[dict]:
        query = self.supabase.table("messages")\
            .select("*")\
            .eq("sender_id", sender_id)\
            .eq("receiver_id", receiver_id)
        if since:
            query = query.gt("id", since)
        return query.order("created_at").execute().data or []

    def conversation(self, user_id: str, friend_id: str, since: int = 0) -> ConversationResponse:
        """Messages between two users in both directions, oldest first; `since` skips ids already seen"""
        try:
            rows = self._direction(user_id, friend_id, since) + self._direction(friend_id, user_id, since)
        except Exception as e:
            raise persistence_error(e, "Loading conversation")
        messages = sorted(
            (MessageResponse(**row) for row in rows),
            key=lambda m: (m.created_at, m.id),
        )
        next_cursor = max((m.id for m in messages), default=since)
        return ConversationResponse(friend_id=friend_id, messages=messages, next_cursor=next_cursor)

    def mark_conversation_read(self, user_id: str, friend_id: str) -> int:
        """Mark messages the friend sent to this user as read"""
        try:
            result = self.supabase.table("messages")\
                .update({"is_read": True})\
                .eq("sender_id", friend_id)\
                .eq("receiver_id", user_id)\
                .eq("is_read", False)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Marking messages read")
        return len(result.data or [])
