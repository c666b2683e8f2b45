"""
Service for conversations and the related customer, advisor, channel and session records.

Related records are upserted by id when a conversation is created. A
conversation is never physically deleted: remove() and archive() only flip
its status, and default lookups only see active conversations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session as DBSession, selectinload

from app.constants.conversations import ActiveStatus, ConversationStatus
from app.exceptions import MissingIdentifier, NotFound
from app.infra.logging_config import get_logger
from app.models.channel import Channel
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.party import Advisor, Customer
from app.models.session import Session
from app.schemas.conversation import (
    ConversationCreate,
    ConversationRead,
    ConversationSummaryRead,
    ConversationUpdate,
)
from app.utils.db.integrity import rollback_and_raise
from app.utils.object_id import require_object_id

logger = get_logger("conversations")

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationService:
    """Create, read and change the status of conversations."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _upsert(self, model: Type[T], record_id: str, values: Dict[str, Any]) -> T:
        """Update the row with this id in place, or add a new one. Flushes, does not commit."""
        row = self.db.get(model, record_id)
        if row is None:
            row = model(id=record_id, **values)
            self.db.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        self.db.flush()
        return row

    def _list_query(self) -> Query[Conversation]:
        return (
            self.db.query(Conversation)
            .options(
                selectinload(Conversation.messages).joinedload(Message.attachment)
            )
            .order_by(Conversation.created_at.desc())
        )

    def _get_active(self, conversation_id: str) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(
                Conversation.id == conversation_id,
                Conversation.status == ConversationStatus.ACTIVE.value,
            )
            .first()
        )

    def _active_messages(self, conversation_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.status == ActiveStatus.ACTIVE.value,
            )
            .order_by(Message.timestamp.asc())
            .all()
        )

    def _set_status(
        self, conversation_id: str, status: ConversationStatus, failure: str
    ) -> ConversationSummaryRead:
        require_object_id(conversation_id, "conversation")
        self.find_one(conversation_id)
        try:
            conversation = self.db.get(Conversation, conversation_id)
            conversation.status = status.value
            conversation.updated_at = _now()
            self.db.commit()
            self.db.refresh(conversation)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, failure)
        logger.info("Conversation %s set to %s", conversation_id, status.value)
        return ConversationSummaryRead.model_validate(conversation)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, data: ConversationCreate) -> ConversationRead:
        """
        Upsert the related records and create the conversation linking them.

        All writes happen in one transaction, so a failure part way through
        leaves no related rows behind.
        """
        require_object_id(data.customer.id, "customer")
        if data.advisor is not None:
            require_object_id(data.advisor.id, "advisor")
        require_object_id(data.channel.id, "channel")
        require_object_id(data.session.id, "session")

        if not data.customer.has_identifier():
            raise MissingIdentifier("customer")
        if data.advisor is not None and not data.advisor.has_identifier():
            raise MissingIdentifier("advisor")

        try:
            customer = self._upsert(
                Customer,
                data.customer.id,
                data.customer.model_dump(exclude={"id"}, exclude_none=True),
            )
            advisor = None
            if data.advisor is not None:
                advisor = self._upsert(
                    Advisor,
                    data.advisor.id,
                    data.advisor.model_dump(exclude={"id"}, exclude_none=True),
                )
            channel = self._upsert(
                Channel, data.channel.id, {"name": data.channel.name.value}
            )
            session = self._upsert(
                Session, data.session.id, {"status": data.session.status.value}
            )

            status = data.status or ConversationStatus.ACTIVE
            conversation = Conversation(
                customer_id=customer.id,
                advisor_id=advisor.id if advisor is not None else None,
                channel_id=channel.id,
                session_id=session.id,
                created_by=data.created_by,
                created_by_client=data.created_by_client,
                status=status.value,
            )
            self.db.add(conversation)
            self.db.commit()
            self.db.refresh(conversation)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to create conversation")

        logger.info(
            "Created conversation %s for customer %s",
            conversation.id,
            conversation.customer_id,
        )
        return ConversationRead.with_messages(conversation, [])

    def find_all(self, skip: int = 0, take: int = 10) -> List[ConversationRead]:
        """Active conversations, newest first, with all their messages."""
        try:
            conversations = (
                self._list_query()
                .filter(Conversation.status == ConversationStatus.ACTIVE.value)
                .offset(skip)
                .limit(take)
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch conversations")
        return [ConversationRead.model_validate(c) for c in conversations]

    def find_one(self, conversation_id: str) -> ConversationRead:
        """Active conversation with its active messages in chronological order."""
        require_object_id(conversation_id, "conversation")
        try:
            conversation = self._get_active(conversation_id)
            if conversation is None:
                raise NotFound("Conversation", conversation_id)
            messages = self._active_messages(conversation_id)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch conversation")
        return ConversationRead.with_messages(conversation, messages)

    def update(
        self, conversation_id: str, data: ConversationUpdate
    ) -> ConversationRead:
        """Apply status / audit fields and an optional session change. Always stamps updated_at."""
        require_object_id(conversation_id, "conversation")
        self.find_one(conversation_id)

        if data.session is not None and data.session.id is not None:
            require_object_id(data.session.id, "session")

        try:
            conversation = self.db.get(Conversation, conversation_id)
            if data.status is not None:
                conversation.status = data.status.value
            if data.updated_by is not None:
                conversation.updated_by = data.updated_by
            if data.updated_by_client is not None:
                conversation.updated_by_client = data.updated_by_client

            if data.session is not None:
                new_session_id = data.session.id
                if new_session_id not in (None, conversation.session_id):
                    values = {}
                    if data.session.status is not None:
                        values["status"] = data.session.status.value
                    session = self._upsert(Session, new_session_id, values)
                    conversation.session_id = session.id
                    conversation.session = session
                elif data.session.status is not None:
                    session = self.db.get(Session, conversation.session_id)
                    session.status = data.session.status.value

            conversation.updated_at = _now()
            self.db.commit()
            self.db.refresh(conversation)
            messages = self._active_messages(conversation_id)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to update conversation")

        logger.info("Updated conversation %s", conversation_id)
        return ConversationRead.with_messages(conversation, messages)

    def remove(self, conversation_id: str) -> ConversationSummaryRead:
        """Soft delete: status becomes inactive."""
        return self._set_status(
            conversation_id,
            ConversationStatus.INACTIVE,
            "Failed to delete conversation",
        )

    def archive(self, conversation_id: str) -> ConversationSummaryRead:
        return self._set_status(
            conversation_id,
            ConversationStatus.ARCHIVE,
            "Failed to archive conversation",
        )

    def find_by_customer(self, customer_id: str) -> List[ConversationRead]:
        """Active conversations of one customer, newest first."""
        require_object_id(customer_id, "customer")
        try:
            conversations = (
                self._list_query()
                .filter(
                    Conversation.customer_id == customer_id,
                    Conversation.status == ConversationStatus.ACTIVE.value,
                )
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(
                self.db, e, "Failed to fetch conversations by customer"
            )
        return [ConversationRead.model_validate(c) for c in conversations]

    def find_by_status(self, status: ConversationStatus) -> List[ConversationRead]:
        try:
            conversations = (
                self._list_query()
                .filter(Conversation.status == ConversationStatus(status).value)
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(
                self.db, e, "Failed to fetch conversations by status"
            )
        return [ConversationRead.model_validate(c) for c in conversations]
