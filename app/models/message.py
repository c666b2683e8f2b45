"""Message model: one row per message exchanged in a conversation."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.constants.conversations import ActiveStatus
from app.db import Base
from app.models.mixins import UTCDateTime, utcnow
from app.utils.object_id import generate_object_id


class Message(Base):
    """Direction is 'incoming' (from the customer) or 'outgoing' (from support)."""

    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_conversation_id_timestamp", "conversation_id", "timestamp"),
    )

    id = Column(String(24), primary_key=True, default=generate_object_id)
    conversation_id = Column(
        String(24), ForeignKey("conversations.id"), nullable=False
    )
    content = Column(Text, nullable=True)
    direction = Column(String(16), nullable=False)
    timestamp = Column(UTCDateTime(timezone=True), default=utcnow, nullable=False)
    status = Column(String(16), nullable=False, default=ActiveStatus.ACTIVE.value)
    attachment_id = Column(
        String(24), ForeignKey("attachments.id"), nullable=True, unique=True
    )

    conversation = relationship("Conversation", back_populates="messages")
    attachment = relationship("Attachment", back_populates="message", lazy="joined")
