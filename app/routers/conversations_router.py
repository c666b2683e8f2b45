"""Conversations API: create, list, get, update, soft delete and archive."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.constants.conversations import ConversationStatus
from app.db import get_db
from app.routers.utils.dependencies import PageParams, verify_api_key
from app.schemas.conversation import (
    ConversationCreate,
    ConversationRead,
    ConversationSummaryRead,
    ConversationUpdate,
)
from app.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/conversations",
    tags=["conversations"],
    dependencies=[Depends(verify_api_key)],
    responses={
        400: {"description": "Invalid input"},
        401: {"description": "Missing or invalid API key"},
    },
)


@router.post("", response_model=ConversationRead, status_code=201)
def create_conversation(
    data: ConversationCreate,
    db: Session = Depends(get_db),
) -> ConversationRead:
    """Create a conversation, upserting its customer, advisor, channel and session."""
    return ConversationService(db).create(data)


@router.get("", response_model=List[ConversationRead])
def list_conversations(
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
) -> List[ConversationRead]:
    """List active conversations, newest first."""
    raw = params.to_raw_params()
    return ConversationService(db).find_all(skip=raw.offset, take=raw.limit)


@router.get("/customer/{customer_id}", response_model=List[ConversationRead])
def list_conversations_by_customer(
    customer_id: str,
    db: Session = Depends(get_db),
) -> List[ConversationRead]:
    """List active conversations of a customer."""
    return ConversationService(db).find_by_customer(customer_id)


@router.get("/status/{status}", response_model=List[ConversationRead])
def list_conversations_by_status(
    status: ConversationStatus,
    db: Session = Depends(get_db),
) -> List[ConversationRead]:
    """List conversations with the given status."""
    return ConversationService(db).find_by_status(status)


@router.get(
    "/{conversation_id}",
    response_model=ConversationRead,
    responses={404: {"description": "Conversation not found"}},
)
def get_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
) -> ConversationRead:
    """Get an active conversation with its active messages."""
    return ConversationService(db).find_one(conversation_id)


@router.patch(
    "/{conversation_id}",
    response_model=ConversationRead,
    responses={404: {"description": "Conversation not found"}},
)
def update_conversation(
    conversation_id: str,
    data: ConversationUpdate,
    db: Session = Depends(get_db),
) -> ConversationRead:
    """Update status, audit fields or the session of a conversation."""
    return ConversationService(db).update(conversation_id, data)


@router.delete(
    "/{conversation_id}",
    response_model=ConversationSummaryRead,
    responses={404: {"description": "Conversation not found"}},
)
def delete_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
) -> ConversationSummaryRead:
    """Soft delete a conversation (status inactive)."""
    return ConversationService(db).remove(conversation_id)


@router.post(
    "/{conversation_id}/archive",
    response_model=ConversationSummaryRead,
    responses={404: {"description": "Conversation not found"}},
)
def archive_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
) -> ConversationSummaryRead:
    """Archive a conversation."""
    return ConversationService(db).archive(conversation_id)
