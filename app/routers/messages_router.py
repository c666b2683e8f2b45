"""Messages API: create, list, get, update and soft delete messages."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.constants.conversations import Direction
from app.db import get_db
from app.routers.utils.dependencies import PageParams, verify_api_key
from app.schemas.conversation import MessageWithConversationRead
from app.schemas.message import MessageCreate, MessageRead, MessageUpdate
from app.services.message_service import MessageService

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    dependencies=[Depends(verify_api_key)],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Missing or invalid API key"},
    },
)


@router.post("", response_model=MessageRead, status_code=201)
def create_message(
    data: MessageCreate,
    db: Session = Depends(get_db),
) -> MessageRead:
    """Create a message, with its attachment when one is supplied."""
    message = MessageService(db).create(data)
    return MessageRead.model_validate(message)


@router.get("", response_model=List[MessageRead])
def list_messages(
    conversation_id: Optional[str] = Query(
        None, description="Only messages of this conversation"
    ),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
) -> List[MessageRead]:
    """List active messages, newest first."""
    raw = params.to_raw_params()
    messages = MessageService(db).find_all(
        conversation_id, skip=raw.offset, take=raw.limit
    )
    return [MessageRead.model_validate(m) for m in messages]


@router.get("/attachments", response_model=List[MessageRead])
def list_messages_with_attachments(
    db: Session = Depends(get_db),
) -> List[MessageRead]:
    """List active messages that carry an attachment."""
    messages = MessageService(db).find_with_attachments()
    return [MessageRead.model_validate(m) for m in messages]


@router.get("/direction/{direction}", response_model=List[MessageRead])
def list_messages_by_direction(
    direction: Direction,
    db: Session = Depends(get_db),
) -> List[MessageRead]:
    messages = MessageService(db).find_by_direction(direction)
    return [MessageRead.model_validate(m) for m in messages]


@router.get(
    "/conversation/{conversation_id}",
    response_model=List[MessageRead],
    responses={404: {"description": "Conversation not found"}},
)
def list_conversation_messages(
    conversation_id: str,
    db: Session = Depends(get_db),
) -> List[MessageRead]:
    """List the active messages of a conversation in chronological order."""
    messages = MessageService(db).get_messages_by_conversation(conversation_id)
    return [MessageRead.model_validate(m) for m in messages]


@router.get(
    "/{message_id}",
    response_model=MessageRead,
    responses={404: {"description": "Message not found"}},
)
def get_message(
    message_id: str,
    db: Session = Depends(get_db),
) -> MessageRead:
    """Get an active message by ID."""
    return MessageRead.model_validate(MessageService(db).find_one(message_id))


@router.get(
    "/{message_id}/conversation",
    response_model=MessageWithConversationRead,
    responses={404: {"description": "Message not found"}},
)
def get_message_with_conversation(
    message_id: str,
    db: Session = Depends(get_db),
) -> MessageWithConversationRead:
    """Get an active message together with its conversation."""
    message = MessageService(db).find_one_with_conversation(message_id)
    return MessageWithConversationRead.model_validate(message)


@router.patch(
    "/{message_id}",
    response_model=MessageRead,
    responses={404: {"description": "Message not found"}},
)
def update_message(
    message_id: str,
    data: MessageUpdate,
    db: Session = Depends(get_db),
) -> MessageRead:
    """Update the content or status of a message."""
    return MessageRead.model_validate(MessageService(db).update(message_id, data))


@router.delete(
    "/{message_id}",
    response_model=MessageRead,
    responses={404: {"description": "Message not found"}},
)
def delete_message(
    message_id: str,
    db: Session = Depends(get_db),
) -> MessageRead:
    """Soft delete a message (status inactive)."""
    return MessageRead.model_validate(MessageService(db).remove(message_id))
