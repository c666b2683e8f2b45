"""Session model: the support session a conversation belongs to."""

from __future__ import annotations

from sqlalchemy import Column, String

from app.constants.conversations import SessionStatus
from app.db import Base


class Session(Base):
    """Open or closed support session. Its status changes independently of the conversation."""

    __tablename__ = "sessions"

    id = Column(String(24), primary_key=True)
    status = Column(String(16), nullable=False, default=SessionStatus.OPEN.value)
