from app.models.attachment import Attachment
from app.models.channel import Channel
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.party import Advisor, Customer
from app.models.session import Session

__all__ = [
    "Advisor",
    "Attachment",
    "Channel",
    "Conversation",
    "Customer",
    "Message",
    "Session",
]
