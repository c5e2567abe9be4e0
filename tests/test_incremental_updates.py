"""Tests for incremental cache updates using fakes and fixtures."""

import asyncio
import random
from pathlib import Path

from loguru import logger

from calloutdex.cache.base import CacheStore
from calloutdex.cache.local import LocalCacheStore
from calloutdex.domain.callout import timestamp_to_readable
from calloutdex.index.orchestrator import CalloutIndex
from tests.fakes import FakeCacheStore, FakeDocumentStore


def _vault(count: int) -> FakeDocumentStore:
    return FakeDocumentStore(
        {f"doc{i}.md": f"> [!note] Doc {i}\n> body {i}\n> ^note-doc{i:03d}" for i in range(count)}
    )


def _index(documents: FakeDocumentStore, cache_store: CacheStore, **kwargs) -> CalloutIndex:
    kwargs.setdefault("debounce_seconds", 60)
    return CalloutIndex(documents=documents, cache_store=cache_store, rng=random.Random(0), **kwargs)


async def test_three_modified_documents_are_queued() -> None:
    documents, cache_store = _vault(10), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()

    for i in range(3):
        documents.put(f"doc{i}.md", f"> [!note] Doc {i}\n> edited\n> ^note-doc{i:03d}")

    assert await index.updater.is_cache_valid(await cache_store.load())
    assert index.updater.pending == {"doc0.md", "doc1.md", "doc2.md"}
    index.updater.reset()


async def test_six_modified_documents_invalidate() -> None:
    documents, cache_store = _vault(10), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()

    for i in range(6):
        documents.put(f"doc{i}.md", "> [!note] edited")

    assert not await index.updater.is_cache_valid(await cache_store.load())
    assert index.updater.pending == frozenset()


async def test_batch_persists_once() -> None:
    documents, cache_store = _vault(10), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()
    saves_before = cache_store.save_count

    for i in range(4):
        documents.put(f"doc{i}.md", f"> [!note] Doc {i}\n> edited {i}\n> ^note-doc{i:03d}")
    await index.extract_all_documents()
    assert await index.updater.flush()

    assert cache_store.save_count == saves_before + 1
    cache = cache_store.cache
    bodies = {c.document_path: c.body for c in cache.callouts}
    assert [bodies[f"doc{i}.md"] for i in range(4)] == [f"edited {i}" for i in range(4)]
    assert bodies["doc5.md"] == "body 5"
    assert cache.file_mod_times["doc0.md"] == timestamp_to_readable(documents.mtime("doc0.md"))


async def test_incremental_update_carries_times_forward() -> None:
    documents, cache_store = _vault(2), FakeCacheStore()
    index = _index(documents, cache_store)
    before = {c.id: c for c in await index.refresh_all()}

    documents.put("doc0.md", "> [!note] Doc 0\n> changed\n> ^note-doc000")
    documents.put("doc1.md", "> [!note] Doc 1\n> body 1\n> ^note-doc001")  # touched, same content
    await index.updater.update_documents(["doc0.md", "doc1.md"])

    after = {c.id: c for c in cache_store.cache.callouts}
    assert after["note-doc000"].created_time == before["note-doc000"].created_time
    assert after["note-doc000"].modified_time == timestamp_to_readable(documents.mtime("doc0.md"))
    assert after["note-doc001"].created_time == before["note-doc001"].created_time
    assert after["note-doc001"].modified_time == before["note-doc001"].modified_time


async def test_unreadable_document_is_dropped_and_seen_as_new() -> None:
    documents, cache_store = _vault(3), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()

    documents.put("doc1.md", "> [!note] edited")
    documents.unreadable.add("doc1.md")
    assert await index.updater.update_documents(["doc1.md"])

    cache = cache_store.cache
    assert "doc1.md" not in cache.file_mod_times
    assert all(c.document_path != "doc1.md" for c in cache.callouts)

    check = await index.validator.check(cache)
    assert check.added == ["doc1.md"]


async def test_deletion_forces_full_rescan() -> None:
    documents, cache_store = _vault(3), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()
    saves_before = cache_store.save_count

    documents.remove("doc2.md")
    index.notify_deleted("doc2.md")
    assert index.updater.stale

    callouts = await index.extract_all_documents()

    assert {c.document_path for c in callouts} == {"doc0.md", "doc1.md"}
    assert cache_store.save_count == saves_before + 1
    assert not index.updater.stale


async def test_too_many_notifications_mark_stale() -> None:
    documents, cache_store = _vault(10), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()

    for i in range(11):
        index.notify_changed(f"doc{i}.md")

    assert index.updater.stale
    assert not await index.updater.flush()


async def test_debounced_notifications_run_as_one_batch() -> None:
    documents, cache_store = _vault(4), FakeCacheStore()
    index = _index(documents, cache_store, debounce_seconds=0.01)
    await index.refresh_all()
    saves_before = cache_store.save_count

    for i in range(3):
        documents.put(f"doc{i}.md", f"> [!note] Doc {i}\n> debounced\n> ^note-doc{i:03d}")
        index.notify_changed(f"doc{i}.md")
    await asyncio.sleep(0.1)

    assert cache_store.save_count == saves_before + 1
    assert index.updater.pending == frozenset()
    bodies = [c.body for c in cache_store.cache.callouts if c.document_path != "doc3.md"]
    assert bodies == ["debounced"] * 3


async def test_concurrent_flushes_do_not_lose_updates() -> None:
    documents, cache_store = _vault(4), FakeCacheStore()
    index = _index(documents, cache_store)
    await index.refresh_all()

    documents.put("doc0.md", "> [!note] Doc 0\n> first\n> ^note-doc000")
    index.notify_changed("doc0.md")
    first = asyncio.ensure_future(index.updater.flush())
    documents.put("doc1.md", "> [!note] Doc 1\n> second\n> ^note-doc001")
    index.notify_changed("doc1.md")
    second = asyncio.ensure_future(index.updater.flush())

    assert await asyncio.gather(first, second) == [True, True]
    bodies = {c.document_path: c.body for c in cache_store.cache.callouts}
    assert bodies["doc0.md"] == "first"
    assert bodies["doc1.md"] == "second"


async def test_update_without_cache_marks_stale() -> None:
    index = _index(_vault(1), FakeCacheStore())

    assert not await index.updater.update_documents(["doc0.md"])
    assert index.updater.stale


async def test_id_assignment_and_flush_both_persist(temp_vault: Path) -> None:
    documents = FakeDocumentStore(
        {
            "doc0.md": "> [!note] Doc 0\n> old\n> ^note-doc000",
            "doc1.md": "> [!note] Doc 1\n> body",
        }
    )
    cache_store = LocalCacheStore(temp_vault / "callouts.json", vault_name="test-vault")
    index = _index(documents, cache_store)
    await index.refresh_all()
    unidentified = next(c for c in await index.extract_all_documents() if c.document_path == "doc1.md")

    documents.put("doc0.md", "> [!note] Doc 0\n> edited\n> ^note-doc000")
    index.notify_changed("doc0.md")
    assignment, flushed = await asyncio.gather(index.assign_id(unidentified), index.updater.flush())

    assert assignment.success
    assert flushed
    cache = await cache_store.load()
    records = {c.document_path: (c.body, c.id) for c in cache.callouts}
    assert records == {
        "doc0.md": ("edited", "note-doc000"),
        "doc1.md": ("body", assignment.callout_id),
    }


async def test_change_during_rescan_stays_pending(temp_vault: Path) -> None:
    documents = _vault(3)
    cache_store = LocalCacheStore(temp_vault / "callouts.json", vault_name="test-vault")
    index = _index(documents, cache_store)
    await index.refresh_all()

    rescan = asyncio.ensure_future(index.refresh_all())
    await asyncio.sleep(0)
    documents.put("doc1.md", "> [!note] Doc 1\n> late edit\n> ^note-doc001")
    index.notify_changed("doc1.md")
    await rescan

    assert index.updater.pending == {"doc1.md"}
    assert await index.updater.flush()
    cache = await cache_store.load()
    assert {c.document_path: c.body for c in cache.callouts}["doc1.md"] == "late edit"


async def test_failed_debounced_update_is_logged() -> None:
    documents, cache_store = _vault(2), FakeCacheStore()
    index = _index(documents, cache_store, debounce_seconds=0.01)
    await index.refresh_all()
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="ERROR", format="{message}")

    try:
        cache_store.fail_loads = True
        index.notify_changed("doc0.md")
        await asyncio.sleep(0.1)
    finally:
        logger.remove(handler_id)

    assert any("Debounced cache update failed" in message for message in messages)
