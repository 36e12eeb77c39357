"""
Chat Service
Reads and writes chat documents in the chats collection
"""
import re
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
import logging
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError

from app.models.chats import Chat

logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"-?[0-9]+")


def parse_message_index(raw: str) -> Optional[int]:
    """Parse a path segment into a message position, None if it is not an integer."""
    if raw is None or not _INDEX_RE.fullmatch(raw):
        return None
    return int(raw)


def serialize_chat(doc: Dict[str, Any]) -> Dict[str, Any]:
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})


class ChatService:
    """
    Service for the chats collection.
    Every chat is addressed by its (userId, id) pair; messages by their position.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _key(user_id: str, chat_id: str) -> Dict[str, str]:
        return {"userId": user_id, "id": chat_id}

    async def list_chats(self, user_id: str) -> List[Dict[str, Any]]:
        """All chats of a user, newest first."""
        cursor = self.collection.find({"userId": user_id}).sort("createdAt", -1)
        chats = await cursor.to_list(length=None)
        logger.info(f"Successfully fetched {len(chats)} chats for user: {user_id}")
        return [serialize_chat(c) for c in chats]

    async def save_chat(self, chat: Chat) -> Dict[str, Any]:
        """
        Upsert a chat by (userId, id).
        Only the fields present in the request are $set, so fields missing from
        the payload survive on update.
        """
        payload = chat.dict(exclude_unset=True)
        payload.pop("_id", None)
        key = self._key(chat.userId, chat.id)

        try:
            result = await self.collection.update_one(key, {"$set": payload}, upsert=True)
        except DuplicateKeyError:
            # lost the insert race on the unique index; the document exists now
            logger.warning(
                f"Concurrent insert for user {chat.userId}, chat ID {chat.id}; retrying as update"
            )
            result = await self.collection.update_one(key, {"$set": payload}, upsert=True)

        logger.info(f"Chat saved/updated successfully for user {chat.userId}, chat ID {chat.id}")
        upserted_id = result.upserted_id
        return {
            "upsertedId": str(upserted_id) if upserted_id is not None else None,
            "modifiedCount": result.modified_count,
        }

    async def delete_chat(self, user_id: str, chat_id: str) -> None:
        result = await self.collection.delete_one(self._key(user_id, chat_id))
        if result.deleted_count != 1:
            logger.info(f"Chat not found for deletion: user {user_id}, chat ID {chat_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Chat not found",
            )
        logger.info(f"Chat deleted successfully for user {user_id}, chat ID {chat_id}")

    async def update_message_content(
        self,
        user_id: str,
        chat_id: str,
        message_index: str,
        content: str,
    ) -> None:
        """
        Replace the content of one message, leaving its other fields and the
        other messages untouched.
        Uses a positional $set so concurrent edits to different messages of the
        same chat do not overwrite each other.
        """
        index = parse_message_index(message_index)
        key = self._key(user_id, chat_id)

        chat = await self.collection.find_one(key, {"messages": 1})
        if not chat:
            logger.info(f"Chat not found for message update: user {user_id}, chat ID {chat_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Chat not found",
            )

        messages = chat.get("messages") or []
        if index is None or index < 0 or index >= len(messages):
            logger.warning(
                f"Invalid message index {message_index!r} for user {user_id}, "
                f"chat ID {chat_id} ({len(messages)} messages)"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid message index",
            )

        position = f"messages.{index}"
        result = await self.collection.update_one(
            {**key, position: {"$exists": True}},
            {"$set": {f"{position}.content": content}},
        )

        if result.modified_count != 1:
            logger.info(
                f"Chat not updated for user {user_id}, chat ID {chat_id}, message index {index}"
            )
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Chat not updated",
            )
        logger.info(f"Message updated successfully in chat {chat_id}, message index {index}")

    async def ping(self) -> None:
        await self.collection.database.command("ping")


def get_chat_service(request: Request) -> ChatService:
    """Dependency returning the service built at startup."""
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized",
        )
    return service
