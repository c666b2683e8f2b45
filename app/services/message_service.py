"""Service for messages and their optional attachment, scoped to an existing conversation."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session as DBSession, joinedload

from app.constants.conversations import ActiveStatus, Direction
from app.exceptions import NotFound
from app.infra.logging_config import get_logger
from app.models.attachment import Attachment
from app.models.conversation import Conversation
from app.models.message import Message
from app.schemas.message import MessageCreate, MessageUpdate
from app.utils.db.integrity import rollback_and_raise
from app.utils.object_id import require_object_id

logger = get_logger("messages")


class MessageService:
    """Create, read, edit and soft delete messages. Attachments are write-once."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    def _active_query(self) -> Query[Message]:
        return self.db.query(Message).filter(
            Message.status == ActiveStatus.ACTIVE.value
        )

    def _ensure_conversation(self, conversation_id: str, failure: str) -> None:
        """Raise NotFound when no conversation row has this id, whatever its status."""
        try:
            exists = (
                self.db.query(Conversation.id)
                .filter(Conversation.id == conversation_id)
                .first()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, failure)
        if exists is None:
            raise NotFound("Conversation", conversation_id)

    def create(self, data: MessageCreate) -> Message:
        """Create the attachment first when one is supplied, then the message linking it."""
        require_object_id(data.conversation_id, "conversation")
        self._ensure_conversation(data.conversation_id, "Failed to create message")

        try:
            attachment_id = None
            if data.attachment is not None:
                attachment = Attachment(
                    type=data.attachment.type.value,
                    url=data.attachment.url,
                    mime_type=data.attachment.mime_type,
                    status=ActiveStatus.ACTIVE.value,
                )
                self.db.add(attachment)
                self.db.flush()
                attachment_id = attachment.id

            message = Message(
                conversation_id=data.conversation_id,
                content=data.content,
                direction=data.direction.value,
                status=ActiveStatus.ACTIVE.value,
                attachment_id=attachment_id,
            )
            self.db.add(message)
            self.db.commit()
            self.db.refresh(message)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to create message")

        logger.info(
            "Created %s message %s in conversation %s",
            message.direction,
            message.id,
            message.conversation_id,
        )
        return message

    def find_all(
        self,
        conversation_id: Optional[str] = None,
        skip: int = 0,
        take: int = 10,
    ) -> List[Message]:
        """Active messages, newest first, optionally limited to one conversation."""
        query = self._active_query()
        if conversation_id:
            require_object_id(conversation_id, "conversation")
            self._ensure_conversation(conversation_id, "Failed to fetch messages")
            query = query.filter(Message.conversation_id == conversation_id)
        try:
            return (
                query.order_by(Message.timestamp.desc()).offset(skip).limit(take).all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch messages")

    def find_one(self, message_id: str) -> Message:
        require_object_id(message_id, "message")
        try:
            message = self._active_query().filter(Message.id == message_id).first()
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch message")
        if message is None:
            raise NotFound("Message", message_id)
        return message

    def update(self, message_id: str, data: MessageUpdate) -> Message:
        """Partial update of content and status."""
        message = self.find_one(message_id)
        try:
            for key, value in data.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                setattr(message, key, value.value if key == "status" else value)
            self.db.commit()
            self.db.refresh(message)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to update message")
        return message

    def remove(self, message_id: str) -> Message:
        """Soft delete: status becomes inactive. The attachment is left as is."""
        message = self.find_one(message_id)
        try:
            message.status = ActiveStatus.INACTIVE.value
            self.db.commit()
            self.db.refresh(message)
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to delete message")
        logger.info("Soft deleted message %s", message_id)
        return message

    def get_messages_by_conversation(self, conversation_id: str) -> List[Message]:
        """Active messages of one conversation in chronological order."""
        require_object_id(conversation_id, "conversation")
        self._ensure_conversation(conversation_id, "Failed to fetch messages")
        try:
            return (
                self._active_query()
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.asc())
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch messages")

    def find_by_direction(self, direction: Direction) -> List[Message]:
        try:
            return (
                self._active_query()
                .filter(Message.direction == Direction(direction).value)
                .order_by(Message.timestamp.desc())
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(self.db, e, "Failed to fetch messages by direction")

    def find_with_attachments(self) -> List[Message]:
        try:
            return (
                self._active_query()
                .filter(Message.attachment_id.isnot(None))
                .order_by(Message.timestamp.desc())
                .all()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(
                self.db, e, "Failed to fetch messages with attachments"
            )

    def find_one_with_conversation(self, message_id: str) -> Message:
        """Active message with its conversation and the conversation's related records loaded."""
        require_object_id(message_id, "message")
        try:
            message = (
                self._active_query()
                .options(joinedload(Message.conversation))
                .filter(Message.id == message_id)
                .first()
            )
        except SQLAlchemyError as e:
            rollback_and_raise(
                self.db, e, "Failed to fetch message with conversation"
            )
        if message is None:
            raise NotFound("Message", message_id)
        return message
