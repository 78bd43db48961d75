from fastapi import APIRouter, Depends
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.messages.schemas import MessageCreate, MessageResponse, ConversationResponse
from taskapp.modules.messages.service import MessageService
from taskapp.modules.notifications.schemas import MarkReadResponse
from taskapp.core.dependencies import SessionContext, get_session_context, require_complete_profile
from supabase import Client

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_supabase)) -> MessageService:
    return MessageService(supabase)


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    message_data: MessageCreate,
    session: SessionContext = Depends(require_complete_profile),
    service: MessageService = Depends(get_message_service)
):
    """Send a direct message"""
    return service.send(session.user_id, session.display_name, message_data)


@router.get("/{friend_id}", response_model=ConversationResponse)
async def get_conversation(
    friend_id: str,
    since: int = 0,
    session: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    """Conversation with a friend; pass `since` to fetch only newer messages"""
    return service.conversation(session.user_id, friend_id, since=since)


@router.post("/{friend_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    friend_id: str,
    session: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service)
):
    return MarkReadResponse(updated=service.mark_conversation_read(session.user_id, friend_id))
