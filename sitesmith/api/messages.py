"""
Chat history endpoints.

Provides endpoints for:
- Retrieving a session's messages, oldest first
- Clearing a session's messages
"""
from typing import List

from fastapi import APIRouter, Depends

from sitesmith.core.deps import get_message_store
from sitesmith.schemas.message import Message, StatusMessage
from sitesmith.services.message_store import MessageStore

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/{session_id}", response_model=List[Message])
def get_messages(
    session_id: str,
    store: MessageStore = Depends(get_message_store),
) -> List[Message]:
    """
    Get chat history for a session.

    Unknown sessions return an empty list.
    """
    return store.list_by_session(session_id)


@router.delete("/{session_id}", response_model=StatusMessage)
def clear_messages(
    session_id: str,
    store: MessageStore = Depends(get_message_store),
) -> StatusMessage:
    """
    Clear chat history for a session.
    """
    store.clear_session(session_id)
    return StatusMessage(message="Chat history cleared")
