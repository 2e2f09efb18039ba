from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.core.stream import ChatProvider, get_chat_provider
from app.models.user import User as UserModel
from app.schemas.chat import StreamToken
from app.schemas.response import ApiResponse, ok
from app.services.chat import ChatService

router = APIRouter()


@router.get("/stream-token", response_model=ApiResponse[StreamToken])
async def get_stream_token(
    current_user: UserModel = Depends(get_current_user),
    chat_provider: ChatProvider = Depends(get_chat_provider)
):
    """Get a chat provider token for real-time messaging"""
    token = ChatService(chat_provider).get_stream_token(current_user)
    return ok(token, "Stream token generated successfully")
