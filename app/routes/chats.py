"""
Chat API Routes
List, save, delete chats and edit single messages
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.models.chats import Chat, ChatSaveResponse, MessageContentUpdate, MessageResponse
from app.services.chat_service import ChatService, get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chats", tags=["chats"])


@router.get("/{user_id}")
async def get_chats(
    user_id: str,
    service: ChatService = Depends(get_chat_service),
):
    """Get all chats of a user, newest first."""
    try:
        chats = await service.list_chats(user_id)
        return JSONResponse(status_code=status.HTTP_200_OK, content=chats)
    except Exception:
        logger.exception(f"Error fetching chats for user {user_id}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Failed to fetch chats"},
        )


@router.post("", response_model=ChatSaveResponse)
async def save_chat(
    chat: Chat,
    service: ChatService = Depends(get_chat_service),
):
    """
    Create a chat or update an existing one.
    The chat is matched on userId and id together.
    """
    try:
        result = await service.save_chat(chat)
        return ChatSaveResponse(message="Chat saved/updated successfully", **result)
    except Exception:
        logger.exception(f"Error saving/updating chat for user {chat.userId}, chat ID {chat.id}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Failed to save/update chat"},
        )


@router.delete("/{user_id}/{chat_id}", response_model=MessageResponse)
async def delete_chat(
    user_id: str,
    chat_id: str,
    service: ChatService = Depends(get_chat_service),
):
    """Delete a chat by its id and userId."""
    try:
        await service.delete_chat(user_id, chat_id)
        return MessageResponse(message="Chat deleted successfully")
    except HTTPException as exc:
        raise exc
    except Exception:
        logger.exception(f"Error deleting chat for user {user_id}, chat ID {chat_id}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Failed to delete chat"},
        )


@router.put("/{user_id}/{chat_id}/messages/{message_index}", response_model=MessageResponse)
async def update_message(
    user_id: str,
    chat_id: str,
    message_index: str,
    body: MessageContentUpdate,
    service: ChatService = Depends(get_chat_service),
):
    """Replace the content of the message at message_index."""
    try:
        await service.update_message_content(user_id, chat_id, message_index, body.content)
        return MessageResponse(message="Message updated successfully")
    except HTTPException as exc:
        raise exc
    except Exception:
        logger.exception(
            f"Error updating chat for user {user_id}, chat ID {chat_id}, message index {message_index}"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Failed to update chat"},
        )
