"""Pytest fixtures for the chat store tests."""

import copy
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

# Settings() needs a connection string at import time; nothing connects in tests
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "chatAppDB_test")

from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.services.chat_service import ChatService, get_chat_service  # noqa: E402

_MISSING = object()


def _lookup(doc, path):
    current = doc
    for part in path.split("."):
        if isinstance(current, list):
            if not part.isdigit() or int(part) >= len(current):
                return _MISSING
            current = current[int(part)]
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _matches(doc, query):
    for path, expected in query.items():
        value = _lookup(doc, path)
        if isinstance(expected, dict) and "$exists" in expected:
            if (value is not _MISSING) != expected["$exists"]:
                return False
        elif value is _MISSING or value != expected:
            return False
    return True


def _set_path(doc, path, value):
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        current = current[int(part)] if isinstance(current, list) else current.setdefault(part, {})
    if isinstance(current, list):
        current[int(parts[-1])] = value
    else:
        current[parts[-1]] = value


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction == -1)
        return self

    async def to_list(self, length=None):
        return copy.deepcopy(self._docs[:length] if length else self._docs)


class FakeChatsCollection:
    """In-memory stand-in for the motor collection, covering the calls ChatService makes."""

    def __init__(self, docs=None):
        self.docs = [copy.deepcopy(d) for d in (docs or [])]
        self.database = SimpleNamespace(command=AsyncMock(return_value={"ok": 1.0}))

    def find(self, query):
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                found = copy.deepcopy(doc)
                if projection:
                    found = {k: v for k, v in found.items() if k == "_id" or projection.get(k)}
                return found
        return None

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                for path, value in update.get("$set", {}).items():
                    _set_path(doc, path, copy.deepcopy(value))
                return SimpleNamespace(
                    matched_count=1,
                    modified_count=int(doc != before),
                    upserted_id=None,
                )
        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
        for path, value in update.get("$set", {}).items():
            _set_path(doc, path, copy.deepcopy(value))
        doc["_id"] = ObjectId()
        self.docs.append(doc)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])

    async def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.fixture
def chats_collection() -> FakeChatsCollection:
    return FakeChatsCollection()


@pytest.fixture
def chat_service(chats_collection) -> ChatService:
    return ChatService(chats_collection)


@pytest.fixture
def client(chat_service):
    """TestClient wired to the in-memory collection; startup hooks do not run."""
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_chat() -> dict:
    return {
        "userId": "u1",
        "id": "c1",
        "createdAt": 100,
        "title": "Greetings",
        "messages": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello there"},
        ],
    }
