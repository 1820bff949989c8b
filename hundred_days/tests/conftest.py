from __future__ import annotations

import sys
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT))

from hundred_days.app.db import init  # noqa: E402
from hundred_days.app.db.mongo import MongoConnectionManager  # noqa: E402
from hundred_days.app.db.redis import RedisConnectionManager  # noqa: E402
from hundred_days.app.schemas.user import UserPublic  # noqa: E402


class _DummyCollection:
    async def create_index(self, *_args: Any, **_kwargs: Any) -> None:
        return None


class _DummyDatabase:
    def __getitem__(self, _name: str) -> _DummyCollection:
        return _DummyCollection()


class _DummyMongoClient:
    def __init__(self) -> None:
        self._db = _DummyDatabase()

    def __getitem__(self, _name: str) -> _DummyDatabase:
        return self._db

    def close(self) -> None:
        return None


class _DummyRedisClient:
    async def aclose(self) -> None:
        return None


@pytest.fixture(autouse=True)
def stub_infrastructure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace the Mongo and Redis clients so the app starts without servers."""
    dummy_mongo_client = _DummyMongoClient()
    dummy_redis_client = _DummyRedisClient()

    async def _noop_ensure_indexes(_db: Any) -> None:
        return None

    async def _noop_close(cls: type) -> None:
        return None

    monkeypatch.setattr(MongoConnectionManager, "get_client", classmethod(lambda cls: dummy_mongo_client))
    monkeypatch.setattr(RedisConnectionManager, "get_client", classmethod(lambda cls: dummy_redis_client))
    monkeypatch.setattr(MongoConnectionManager, "close", classmethod(lambda cls: _noop_close(cls)))
    monkeypatch.setattr(RedisConnectionManager, "close", classmethod(lambda cls: _noop_close(cls)))
    monkeypatch.setattr(init, "ensure_indexes", _noop_ensure_indexes)


class FakeCursor:
    """Stands in for a motor cursor: chainable sort/limit and async iteration."""

    def __init__(self, docs: list[dict] | None = None) -> None:
        self.docs = list(docs or [])
        self.sort_args: tuple = ()
        self.limit_value: int | None = None

    def sort(self, *args: Any, **_kwargs: Any) -> "FakeCursor":
        self.sort_args = args
        return self

    def limit(self, value: int) -> "FakeCursor":
        self.limit_value = value
        self.docs = self.docs[:value]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield doc


class MemoryRedis:
    """In-memory subset of the redis.asyncio commands the services use."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttl: dict[str, int] = {}

    async def get(self, key: str) -> Any:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        self.store[key] = value
        if ex:
            self.ttl[key] = ex
        return True

    async def exists(self, key: str) -> int:
        return int(key in self.store)

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def sadd(self, key: str, *members: str) -> int:
        bucket = self.store.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    async def srem(self, key: str, *members: str) -> int:
        bucket = self.store.get(key, set())
        removed = len(bucket & set(members))
        bucket.difference_update(members)
        return removed

    async def smembers(self, key: str) -> set[str]:
        return set(self.store.get(key, set()))

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttl[key] = seconds
        return key in self.store


@pytest.fixture
def memory_redis() -> MemoryRedis:
    return MemoryRedis()


def _make_collection() -> AsyncMock:
    collection = AsyncMock()
    # motor's find() returns a cursor synchronously
    collection.find = MagicMock(return_value=FakeCursor())
    return collection


@pytest.fixture
def make_cursor() -> type[FakeCursor]:
    return FakeCursor


@pytest.fixture
def collections() -> dict[str, AsyncMock]:
    return defaultdict(_make_collection)


@pytest.fixture
def mock_db(collections: dict[str, AsyncMock]) -> MagicMock:
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda name: collections[name])
    return db


@pytest.fixture
def sample_user() -> UserPublic:
    return UserPublic(
        id=str(ObjectId()),
        email="runner@example.com",
        display_name="Runner",
        timezone="UTC",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def pro_user(sample_user: UserPublic) -> UserPublic:
    return sample_user.model_copy(update={"is_pro": True})


def challenge_doc(user_id: str, **overrides: Any) -> dict:
    start = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
    doc = {
        "_id": ObjectId(),
        "user_id": user_id,
        "title": "Read every day",
        "start_date": start,
        "last_check_in_date": None,
        "last_check_in_day": None,
        "streak_count": 0,
        "longest_streak": 0,
        "days_completed": 0,
        "is_completed_today": False,
        "is_archived": False,
        "created_at": start,
        "last_modified": start,
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def make_challenge(sample_user: UserPublic):
    def _make(**overrides: Any) -> dict:
        return challenge_doc(sample_user.id, **overrides)

    return _make
