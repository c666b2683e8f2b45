"""Channel model: the messaging platform a conversation runs on."""

from __future__ import annotations

from sqlalchemy import Column, String

from app.db import Base


class Channel(Base):
    __tablename__ = "channels"

    id = Column(String(24), primary_key=True)
    name = Column(String(32), nullable=False)  # 'waba' | 'threecx' | 'watsonx'
