"""Pydantic schemas for Message and Attachment."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.constants.conversations import ActiveStatus, AttachmentType, Direction

# -----------------------------------------------------------------------------
# Attachment schemas
# -----------------------------------------------------------------------------


class AttachmentCreate(BaseModel):
    """Attachment payload sent along with a new message."""

    type: AttachmentType
    url: str = Field(..., min_length=1)
    mime_type: Optional[str] = None

    model_config = {"extra": "forbid"}


class AttachmentRead(BaseModel):
    id: str
    type: AttachmentType
    url: str
    mime_type: Optional[str] = None
    status: ActiveStatus

    model_config = {"from_attributes": True}


# -----------------------------------------------------------------------------
# Message schemas
# -----------------------------------------------------------------------------


class MessageCreate(BaseModel):
    """Schema for creating a message in an existing conversation."""

    conversation_id: str
    content: Optional[str] = None
    direction: Direction
    attachment: Optional[AttachmentCreate] = None

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "example": {
                "conversation_id": "507f1f77bcf86cd799439015",
                "direction": "incoming",
                "content": "Hello",
            }
        },
    }


class MessageUpdate(BaseModel):
    """Partial update. Attachments cannot be replaced."""

    content: Optional[str] = None
    status: Optional[ActiveStatus] = None

    model_config = {"extra": "forbid"}


class MessageRead(BaseModel):
    """Message for API responses, with its attachment embedded when present."""

    id: str
    conversation_id: str
    content: Optional[str] = None
    direction: Direction
    timestamp: datetime
    status: ActiveStatus
    attachment_id: Optional[str] = None
    attachment: Optional[AttachmentRead] = None

    model_config = {"from_attributes": True}
