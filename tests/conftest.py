import random
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient

from calloutdex.api import create_app
from calloutdex.domain.callout import CalloutItem
from calloutdex.index.orchestrator import CalloutIndex
from calloutdex.parsing.callout_parser import CalloutParser
from tests.fakes import FakeCacheStore, FakeDocumentStore

NOTES_TEXT = """# Project

## Ideas

> [!note] First idea
> Links to [[Reading#^quote-abc123|source]].
> ^note-idea01

> [!warning] Careful
> Nothing links here.
"""

READING_TEXT = """# Reading

> [!quote] Someone said
> Something wise.
> See [[Notes#^note-idea01]].
> ^quote-abc123
"""


@pytest.fixture
def parser() -> CalloutParser:
    return CalloutParser()


@pytest.fixture
def document_store() -> FakeDocumentStore:
    return FakeDocumentStore({"Notes.md": NOTES_TEXT, "Reading.md": READING_TEXT})


@pytest.fixture
def cache_store() -> FakeCacheStore:
    return FakeCacheStore()


@pytest.fixture
async def index(
    document_store: FakeDocumentStore, cache_store: FakeCacheStore
) -> AsyncGenerator[CalloutIndex, None]:
    """Index over the fake stores. The debounce is long so batches only run on flush()."""
    callout_index = CalloutIndex(
        documents=document_store,
        cache_store=cache_store,
        debounce_seconds=60,
        rng=random.Random(42),
    )
    yield callout_index
    callout_index.updater.reset()


@pytest.fixture
def make_callout():
    """Factory for callout records with sensible defaults."""

    def _make(document_path: str = "A.md", callout_id: str | None = None, **fields) -> CalloutItem:
        fields.setdefault("type", "note")
        fields.setdefault("line_number", 1)
        return CalloutItem(document_path=document_path, id=callout_id, **fields)

    return _make


@pytest.fixture
def test_client(document_store: FakeDocumentStore, cache_store: FakeCacheStore) -> Generator[TestClient, None, None]:
    """Create test client with fake implementations."""
    callout_index = CalloutIndex(
        documents=document_store,
        cache_store=cache_store,
        debounce_seconds=60,
        rng=random.Random(7),
    )
    with TestClient(create_app(index=callout_index)) as client:
        yield client


@pytest.fixture
def temp_vault() -> Generator[Path, None, None]:
    """Create a temporary vault directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)
