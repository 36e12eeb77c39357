"""Chat document models."""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One entry of a chat; addressed by its position in `messages`."""
    content: Optional[str] = None

    class Config:
        extra = "allow"


class Chat(BaseModel):
    """Chat document as sent by the client. Unknown fields are stored as-is."""
    userId: str = Field(..., min_length=1, description="Owning user")
    id: str = Field(..., min_length=1, description="Chat id, unique per user")
    createdAt: Optional[Any] = Field(default=None, description="Used for newest-first listing")
    messages: List[ChatMessage] = Field(default_factory=list)

    class Config:
        extra = "allow"


class MessageContentUpdate(BaseModel):
    content: str


class ChatSaveResponse(BaseModel):
    message: str
    upsertedId: Optional[str] = None
    modifiedCount: int


class MessageResponse(BaseModel):
    message: str
