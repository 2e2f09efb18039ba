import logging
from typing import Optional, Protocol

from fastapi import Request
from stream_chat import StreamChatAsync

from app.core.config import settings
from app.utils.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class ChatProvider(Protocol):
    async def upsert_user(self, user_id: int, name: str, image_url: str) -> None:
        ...

    def create_token(self, user_id: int) -> str:
        ...


class StreamChatProvider:
    """Chat identities and tokens backed by Stream"""

    def __init__(self, api_key: str, api_secret: str, timeout: float = 6.0):
        self.client = StreamChatAsync(api_key=api_key, api_secret=api_secret, timeout=timeout)

    async def upsert_user(self, user_id: int, name: str, image_url: str) -> None:
        """Create or update the remote chat identity"""
        try:
            await self.client.upsert_user({"id": str(user_id), "name": name, "image": image_url})
        except Exception as exc:
            logger.error("Stream upsert failed for user %s: %s", user_id, exc)
            raise UpstreamError("Error upserting chat user") from exc

    def create_token(self, user_id: int) -> str:
        try:
            return self.client.create_token(str(user_id))
        except Exception as exc:
            logger.error("Stream token generation failed for user %s: %s", user_id, exc)
            raise UpstreamError("Error generating chat token") from exc

    async def close(self) -> None:
        await self.client.close()


def build_chat_provider() -> Optional[StreamChatProvider]:
    if not settings.STREAM_API_KEY or not settings.STREAM_API_SECRET:
        logger.warning("Stream API key or secret missing, chat features are disabled")
        return None
    return StreamChatProvider(
        settings.STREAM_API_KEY,
        settings.STREAM_API_SECRET,
        timeout=settings.STREAM_TIMEOUT_SECONDS,
    )


def get_chat_provider(request: Request) -> ChatProvider:
    provider = getattr(request.app.state, "chat_provider", None)
    if provider is None:
        raise ConfigurationError("Chat provider is not configured")
    return provider
