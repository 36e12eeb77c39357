# app/db.py
import logging
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING
from pymongo.server_api import ServerApi

from app.config import settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


def get_client() -> AsyncIOMotorClient:
    """
    Returns a singleton AsyncIOMotorClient. Creates it if not already created.
    """
    global _client
    if _client is None:
        if not settings.mongodb_uri:
            raise RuntimeError("MONGODB_URI not set in environment")
        kwargs = {}
        if settings.mongo_server_api_version:
            kwargs["server_api"] = ServerApi(
                settings.mongo_server_api_version,
                strict=True,
                deprecation_errors=True,
            )
        _client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
    return _client


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the configured database object.
    """
    global _db
    if _db is None:
        _db = get_client()[settings.mongo_db_name]
    return _db


def get_collection(name: str) -> AsyncIOMotorCollection:
    """
    Convenience to get a collection from the configured DB.
    Usage: chats = get_collection('chats'); await chats.find_one({...})
    """
    return get_database()[name]


async def ping() -> None:
    """Round trip to the deployment; raises if the server is unreachable."""
    await get_client().admin.command("ping")
    logger.info("Pinged MongoDB deployment, connection is healthy")


def close_client() -> None:
    """
    Close the motor client - call this on application shutdown.
    """
    global _client, _db
    if _client is not None:
        _client.close()
        _client = None
        _db = None


async def create_indexes() -> None:
    chats = get_collection(settings.chats_collection)
    # (userId, id) is the natural key of a chat
    await chats.create_index(
        [("userId", ASCENDING), ("id", ASCENDING)],
        unique=True,
        name="userId_id_unique",
    )
    await chats.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
