"""Pydantic schemas for Conversation and its related entities."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from app.constants.conversations import ChannelName, ConversationStatus, SessionStatus
from app.schemas.message import MessageRead

# -----------------------------------------------------------------------------
# Related entity inputs (upserted by id on conversation create)
# -----------------------------------------------------------------------------


class PartyInput(BaseModel):
    """Customer or advisor. At least one of name, email, phone is required."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"extra": "forbid"}

    def has_identifier(self) -> bool:
        return bool(self.name or self.email or self.phone)


class ChannelInput(BaseModel):
    id: str
    name: ChannelName

    model_config = {"extra": "forbid"}


class SessionInput(BaseModel):
    id: str
    status: SessionStatus

    model_config = {"extra": "forbid"}


class SessionPatch(BaseModel):
    """Session change carried by a conversation update. A new id re-points the conversation."""

    id: Optional[str] = None
    status: Optional[SessionStatus] = None

    model_config = {"extra": "forbid"}


# -----------------------------------------------------------------------------
# Conversation inputs
# -----------------------------------------------------------------------------


class ConversationCreate(BaseModel):
    """Schema for creating a conversation together with its related entities."""

    customer: PartyInput
    advisor: Optional[PartyInput] = None
    channel: ChannelInput
    session: SessionInput
    status: Optional[ConversationStatus] = None
    created_by: Optional[str] = None
    created_by_client: Optional[str] = None

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "example": {
                "customer": {"id": "507f1f77bcf86cd799439011", "name": "John Doe"},
                "channel": {"id": "507f1f77bcf86cd799439013", "name": "waba"},
                "session": {"id": "507f1f77bcf86cd799439014", "status": "open"},
            }
        },
    }


class ConversationUpdate(BaseModel):
    """Schema for updating a conversation. All fields optional."""

    status: Optional[ConversationStatus] = None
    session: Optional[SessionPatch] = None
    updated_by: Optional[str] = None
    updated_by_client: Optional[str] = None

    model_config = {"extra": "forbid"}


# -----------------------------------------------------------------------------
# Read schemas
# -----------------------------------------------------------------------------


class PartyRead(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


class ChannelRead(BaseModel):
    id: str
    name: ChannelName

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    id: str
    status: SessionStatus

    model_config = {"from_attributes": True}


class ConversationSummaryRead(BaseModel):
    """Conversation with its related entities but without messages."""

    id: str
    customer: PartyRead
    advisor: Optional[PartyRead] = None
    channel: ChannelRead
    session: SessionRead
    created_by: Optional[str] = None
    created_by_client: Optional[str] = None
    updated_by: Optional[str] = None
    updated_by_client: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    status: ConversationStatus

    model_config = {"from_attributes": True}


class ConversationRead(ConversationSummaryRead):
    """Conversation for API responses, with its messages."""

    messages: list[MessageRead] = Field(default_factory=list)

    @classmethod
    def with_messages(cls, conversation, messages: Iterable) -> "ConversationRead":
        """Build from an ORM conversation using an explicit message list instead of the relationship."""
        summary = ConversationSummaryRead.model_validate(conversation)
        return cls(
            **summary.model_dump(),
            messages=[MessageRead.model_validate(m) for m in messages],
        )


class MessageWithConversationRead(MessageRead):
    """Message together with the conversation it belongs to."""

    conversation: ConversationSummaryRead
