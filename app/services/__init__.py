from app.services.conversation_service import ConversationService
from app.services.message_service import MessageService

__all__ = [
    "ConversationService",
    "MessageService",
]
