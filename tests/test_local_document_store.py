"""Tests for LocalDocumentStore functionality."""

from pathlib import Path

import pytest

from calloutdex.documents.local import LocalDocumentStore


@pytest.fixture
def vault(temp_vault: Path) -> Path:
    (temp_vault / "Notes.md").write_text("> [!note] Hello")
    (temp_vault / "folder").mkdir()
    (temp_vault / "folder" / "Deep.md").write_text("text")
    (temp_vault / "folder" / "Drawing.excalidraw.md").write_text("drawing")
    (temp_vault / ".obsidian").mkdir()
    (temp_vault / ".obsidian" / "workspace.md").write_text("ignored")
    (temp_vault / "Board.canvas").write_text("{}")
    return temp_vault


@pytest.fixture
def store(vault: Path) -> LocalDocumentStore:
    return LocalDocumentStore(vault)


async def test_list_documents(store: LocalDocumentStore) -> None:
    assert await store.list_documents() == ["Notes.md", "folder/Deep.md"]


async def test_list_files_by_extension(store: LocalDocumentStore) -> None:
    assert await store.list_files(".canvas") == ["Board.canvas"]


async def test_read_and_write(store: LocalDocumentStore, vault: Path) -> None:
    assert await store.read("Notes.md") == "> [!note] Hello"

    await store.write("new/Created.md", "created")

    assert (vault / "new" / "Created.md").read_text() == "created"
    assert await store.exists("new/Created.md")


async def test_read_missing_raises(store: LocalDocumentStore) -> None:
    with pytest.raises(FileNotFoundError):
        await store.read("Missing.md")


async def test_modified_time(store: LocalDocumentStore, vault: Path) -> None:
    assert await store.modified_time("Notes.md") == (vault / "Notes.md").stat().st_mtime
    assert await store.modified_time("Missing.md") is None


async def test_delete_and_ensure_folder(store: LocalDocumentStore, vault: Path) -> None:
    await store.ensure_folder("Callout Canvas/sub")
    assert (vault / "Callout Canvas" / "sub").is_dir()

    await store.delete("Board.canvas")
    await store.delete("Board.canvas")
    assert not await store.exists("Board.canvas")


async def test_paths_outside_vault_are_rejected(store: LocalDocumentStore) -> None:
    with pytest.raises(ValueError):
        await store.read("../outside.md")
