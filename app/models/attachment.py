"""Attachment model: media or file linked to at most one message."""

from __future__ import annotations

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from app.constants.conversations import ActiveStatus
from app.db import Base
from app.utils.object_id import generate_object_id


class Attachment(Base):
    """Immutable once created; the owning message references it via attachment_id."""

    __tablename__ = "attachments"

    id = Column(String(24), primary_key=True, default=generate_object_id)
    type = Column(String(16), nullable=False)  # image | audio | video | file
    url = Column(Text, nullable=False)
    mime_type = Column(String(255), nullable=True)
    status = Column(String(16), nullable=False, default=ActiveStatus.ACTIVE.value)

    message = relationship("Message", back_populates="attachment", uselist=False)
