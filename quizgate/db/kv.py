from __future__ import annotations

import copy
import threading
from typing import Any, Dict, Optional, Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from quizgate.core.errors import UpstreamUnavailable
from quizgate.db import crud
from quizgate.db.models import Base
from quizgate.db.session import make_engine, make_sessionmaker

MEMORY_URL = "memory://"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...

    async def put(self, key: str, value: Any) -> None: ...


class SqlKeyValueStore:
    """
    Key-value store over a single SQLAlchemy table (`kv_entries`).
    Values are JSON documents; get/put are independent transactions.
    """

    def __init__(self, url: str) -> None:
        self.engine = make_engine(url)
        self._sessions = make_sessionmaker(self.engine)

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def get(self, key: str) -> Optional[Any]:
        try:
            async with self._sessions() as db:
                entry = await crud.get_entry(db, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError:
            logger.exception("KV read failed for {}", key)
            raise UpstreamUnavailable("Analytics store is unavailable") from None

    async def put(self, key: str, value: Any) -> None:
        try:
            async with self._sessions() as db:
                await crud.put_entry(db, key, value)
        except SQLAlchemyError:
            logger.exception("KV write failed for {}", key)
            raise UpstreamUnavailable("Analytics store is unavailable") from None

    async def close(self) -> None:
        await self.engine.dispose()


class InMemoryKeyValueStore:
    """
    Process-local stand-in for development and tests.
    Values are deep-copied on the way in and out, so callers see
    snapshot semantics like they would against a remote store.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()

    async def init(self) -> None:
        return None

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    async def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    async def close(self) -> None:
        return None


def build_store(url: str | None) -> SqlKeyValueStore | InMemoryKeyValueStore | None:
    """None means no store is configured; callers must report that, not crash."""
    if not url:
        return None
    if url == MEMORY_URL:
        return InMemoryKeyValueStore()
    return SqlKeyValueStore(url)
