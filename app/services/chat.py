import logging

from app.core.stream import ChatProvider
from app.models.user import User
from app.schemas.chat import StreamToken

logger = logging.getLogger(__name__)


class ChatService:

    def __init__(self, chat_provider: ChatProvider):
        self.chat_provider = chat_provider

    def get_stream_token(self, user: User) -> StreamToken:
        """Token the client uses to connect to the chat provider directly"""
        token = self.chat_provider.create_token(user.id)
        logger.debug("Issued chat token for user %s", user.id)
        return StreamToken(token=token)
