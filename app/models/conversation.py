"""Conversation model: one row per customer-support conversation."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from app.constants.conversations import ConversationStatus
from app.db import Base
from app.models.mixins import TimestampMixin
from app.utils.object_id import generate_object_id


class Conversation(Base, TimestampMixin):
    """
    Links a customer, an optional advisor, a channel and a session.

    Never physically deleted: status 'inactive' is a soft delete and
    'archive' an archived conversation. Default lookups only see 'active'.
    """

    __tablename__ = "conversations"

    __table_args__ = (
        Index("ix_conversations_status_created_at", "status", "created_at"),
    )

    id = Column(String(24), primary_key=True, default=generate_object_id)
    customer_id = Column(
        String(24), ForeignKey("customers.id"), nullable=False, index=True
    )
    advisor_id = Column(String(24), ForeignKey("advisors.id"), nullable=True)
    channel_id = Column(String(24), ForeignKey("channels.id"), nullable=False)
    session_id = Column(String(24), ForeignKey("sessions.id"), nullable=False)
    created_by = Column(String(255), nullable=True)
    created_by_client = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    updated_by_client = Column(String(255), nullable=True)
    status = Column(
        String(16), nullable=False, default=ConversationStatus.ACTIVE.value
    )

    customer = relationship("Customer", lazy="joined")
    advisor = relationship("Advisor", lazy="joined")
    channel = relationship("Channel", lazy="joined")
    session = relationship("Session", lazy="joined")
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.timestamp",
    )
