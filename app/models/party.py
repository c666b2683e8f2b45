"""Customer and Advisor: the two parties of a support conversation."""

from __future__ import annotations

from sqlalchemy import Column, String

from app.db import Base


class Customer(Base):
    """Customer contacted through a conversation. Id is supplied by the caller."""

    __tablename__ = "customers"

    id = Column(String(24), primary_key=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(64), nullable=True)


class Advisor(Base):
    """Agent handling the conversation on the support side."""

    __tablename__ = "advisors"

    id = Column(String(24), primary_key=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(64), nullable=True)
