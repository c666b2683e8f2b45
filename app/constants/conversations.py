"""Closed value sets for conversation, session, channel and message records."""

from enum import StrEnum


class ConversationStatus(StrEnum):
    """Conversation lifecycle flag. Only ACTIVE rows show up in default queries."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVE = "archive"


class ActiveStatus(StrEnum):
    """Two-state flag used by messages and attachments."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class ChannelName(StrEnum):
    """Messaging platform label attached to a conversation."""

    WABA = "waba"
    THREECX = "threecx"
    WATSONX = "watsonx"


class SessionStatus(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class Direction(StrEnum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class AttachmentType(StrEnum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"
