"""Publish-state tracking: which jobs were already announced.

All decisions go through ``PublishStateTracker.claim`` which serializes the
check-and-mark per job id. Different job ids never wait on each other.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Set

from common.persistence import models as orm_models
from common.persistence.database import get_engine, get_session_factory, session_scope
from common.persistence.repository import PublishedJobRepository

logger = logging.getLogger(__name__)


class PublishStore(ABC):
    """Set of published job ids. Entries are only ever added."""

    @abstractmethod
    async def contains(self, job_id: str) -> bool:
        ...

    @abstractmethod
    async def add_if_absent(self, job_id: str) -> bool:
        """Add the id; True only for the call that actually inserted it."""

    @abstractmethod
    async def list_recent(self, limit: int = 50) -> List[str]:
        ...


class InMemoryPublishStore(PublishStore):
    """Process-local store. State is lost on restart."""

    def __init__(self) -> None:
        self._ids: Set[str] = set()
        self._order: List[str] = []

    async def contains(self, job_id: str) -> bool:
        return job_id in self._ids

    async def add_if_absent(self, job_id: str) -> bool:
        if job_id in self._ids:
            return False
        self._ids.add(job_id)
        self._order.append(job_id)
        return True

    async def list_recent(self, limit: int = 50) -> List[str]:
        return list(reversed(self._order[-limit:]))


class SqlPublishStore(PublishStore):
    """Durable store on the ``published_jobs`` table.

    The primary key makes insert-if-absent atomic across processes. Blocking
    SQLAlchemy calls run in a worker thread.
    """

    def __init__(self, database_url: Optional[str] = None, session_factory=None) -> None:
        if session_factory is None:
            engine = get_engine(database_url)
            orm_models.Base.metadata.create_all(engine)
            session_factory = get_session_factory(engine)
        self._session_factory = session_factory

    def _contains(self, job_id: str) -> bool:
        with session_scope(self._session_factory) as session:
            return PublishedJobRepository(session).exists(job_id)

    def _add_if_absent(self, job_id: str) -> bool:
        with session_scope(self._session_factory) as session:
            return PublishedJobRepository(session).insert_if_absent(job_id)

    def _list_recent(self, limit: int) -> List[str]:
        with session_scope(self._session_factory) as session:
            return [row.job_id for row in PublishedJobRepository(session).list_recent(limit)]

    async def contains(self, job_id: str) -> bool:
        return await asyncio.to_thread(self._contains, job_id)

    async def add_if_absent(self, job_id: str) -> bool:
        return await asyncio.to_thread(self._add_if_absent, job_id)

    async def list_recent(self, limit: int = 50) -> List[str]:
        return await asyncio.to_thread(self._list_recent, limit)


class PublishStateTracker:
    """Answers "already published?" and commits publish decisions atomically."""

    def __init__(self, store: Optional[PublishStore] = None) -> None:
        self._store = store or InMemoryPublishStore()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def _job_lock(self, job_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(job_id, asyncio.Lock())
        self._waiters[job_id] = self._waiters.get(job_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[job_id] -= 1
            if self._waiters[job_id] == 0:
                del self._waiters[job_id]
                self._locks.pop(job_id, None)

    async def was_published(self, job_id: str) -> bool:
        return await self._store.contains(job_id)

    async def mark_published(self, job_id: str) -> None:
        """Idempotent: marking an already published job is a no-op."""

        async with self._job_lock(job_id):
            if await self._store.add_if_absent(job_id):
                logger.info("marked job %s as published", job_id)

    async def claim(self, job_id: str) -> bool:
        """Atomic check-and-mark. Exactly one caller per job id ever gets True."""

        async with self._job_lock(job_id):
            if await self._store.contains(job_id):
                return False
            claimed = await self._store.add_if_absent(job_id)
        if claimed:
            logger.info("marked job %s as published", job_id)
        return claimed

    async def recent(self, limit: int = 50) -> List[str]:
        return await self._store.list_recent(limit)

    @property
    def pending_locks(self) -> int:
        """Number of job ids with a decision in flight."""

        return len(self._locks)


def build_publish_store(database_url: Optional[str]) -> PublishStore:
    if database_url:
        logger.info("using durable publish store")
        return SqlPublishStore(database_url)
    logger.warning("PUBLISH_STORE_URL not set, publish state will not survive a restart")
    return InMemoryPublishStore()
