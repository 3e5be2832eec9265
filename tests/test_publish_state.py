import asyncio

from conftest import InterleavingStore

from ingestion_service.publish_state import (
    InMemoryPublishStore,
    PublishStateTracker,
    SqlPublishStore,
    build_publish_store,
)


def test_claim_only_succeeds_once():
    tracker = PublishStateTracker()

    async def scenario():
        first = await tracker.claim("job-1")
        second = await tracker.claim("job-1")
        return first, second, await tracker.was_published("job-1")

    assert asyncio.run(scenario()) == (True, False, True)


def test_mark_published_is_idempotent_and_monotonic():
    tracker = PublishStateTracker()

    async def scenario():
        assert await tracker.was_published("job-2") is False
        await tracker.mark_published("job-2")
        await tracker.mark_published("job-2")
        return await tracker.was_published("job-2"), await tracker.claim("job-2"), await tracker.recent()

    published, claimed, recent = asyncio.run(scenario())
    assert published is True
    assert claimed is False
    assert recent == ["job-2"]


def test_concurrent_claims_for_same_job_yield_single_winner():
    tracker = PublishStateTracker(InterleavingStore())

    async def scenario():
        return await asyncio.gather(*(tracker.claim("job-3") for _ in range(100)))

    results = asyncio.run(scenario())
    assert results.count(True) == 1
    assert tracker.pending_locks == 0


def test_different_jobs_do_not_block_each_other():
    tracker = PublishStateTracker(InterleavingStore())

    async def scenario():
        return await asyncio.gather(*(tracker.claim(f"job-{i}") for i in range(20)))

    assert all(asyncio.run(scenario()))
    assert tracker.pending_locks == 0


def test_in_memory_store_lists_most_recent_first():
    store = InMemoryPublishStore()

    async def scenario():
        for job_id in ("a", "b", "c"):
            await store.add_if_absent(job_id)
        return await store.list_recent(2)

    assert asyncio.run(scenario()) == ["c", "b"]


def test_sql_store_survives_restart(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'published.db'}"

    async def first_process():
        tracker = PublishStateTracker(SqlPublishStore(url))
        return await tracker.claim("job-9"), await tracker.claim("job-9")

    async def second_process():
        tracker = PublishStateTracker(SqlPublishStore(url))
        return await tracker.was_published("job-9"), await tracker.claim("job-9"), await tracker.recent()

    assert asyncio.run(first_process()) == (True, False)
    assert asyncio.run(second_process()) == (True, False, ["job-9"])


def test_sql_store_concurrent_claims(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'race.db'}"
    tracker = PublishStateTracker(SqlPublishStore(url))

    async def scenario():
        return await asyncio.gather(*(tracker.claim("job-race") for _ in range(10)))

    assert asyncio.run(scenario()).count(True) == 1


def test_sql_store_rejects_duplicate_insert_directly(tmp_path):
    store = SqlPublishStore(f"sqlite+pysqlite:///{tmp_path / 'dup.db'}")

    async def scenario():
        return await store.add_if_absent("x"), await store.add_if_absent("x")

    assert asyncio.run(scenario()) == (True, False)


def test_build_publish_store_picks_backend(tmp_path):
    assert isinstance(build_publish_store(None), InMemoryPublishStore)
    assert isinstance(build_publish_store(f"sqlite+pysqlite:///{tmp_path / 's.db'}"), SqlPublishStore)


def test_sql_store_accepts_unbounded_job_ids(tmp_path):
    from sqlalchemy import Text

    from common.persistence.models import PublishedJobORM

    assert isinstance(PublishedJobORM.__table__.c.job_id.type, Text)

    long_id = "job-" + "x" * 500
    tracker = PublishStateTracker(SqlPublishStore(f"sqlite+pysqlite:///{tmp_path / 'long.db'}"))

    async def scenario():
        return await tracker.claim(long_id), await tracker.claim(long_id), await tracker.recent()

    first, second, recent = asyncio.run(scenario())
    assert (first, second) == (True, False)
    assert recent == [long_id]
