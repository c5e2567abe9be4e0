import asyncio
from pathlib import Path

from loguru import logger

from calloutdex.documents.base import DocumentStore


class LocalDocumentStore(DocumentStore):
    """Document store over a vault directory on the local filesystem.

    Blocking filesystem calls run in worker threads so callers can await them.
    """

    def __init__(self, base_path: str | Path, ignored_folders: list[str] | None = None):
        """Initialize LocalDocumentStore.

        Args:
            base_path: Root directory of the vault
            ignored_folders: Top-level folders never listed (e.g. ``.obsidian``, ``.calloutdex``)
        """
        self.base_path = Path(base_path)
        self.ignored_folders = ignored_folders or [".obsidian", ".calloutdex", ".git", ".trash"]

    def _resolve(self, path: str) -> Path:
        resolved = (self.base_path / path).resolve()
        if not resolved.is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Path escapes the vault: {path}")
        return resolved

    def _is_ignored(self, relative: Path) -> bool:
        return bool(relative.parts) and relative.parts[0] in self.ignored_folders

    def _list(self, extension: str) -> list[str]:
        paths = []
        for file in self.base_path.rglob(f"*{extension}"):
            relative = file.relative_to(self.base_path)
            if file.is_file() and not self._is_ignored(relative):
                paths.append(relative.as_posix())
        return sorted(paths)

    async def list_documents(self) -> list[str]:
        documents = await asyncio.to_thread(self._list, ".md")
        # Excalidraw drawings are stored as markdown but hold no callouts
        return [d for d in documents if not d.endswith(".excalidraw.md")]

    async def list_files(self, extension: str) -> list[str]:
        return await asyncio.to_thread(self._list, extension)

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._resolve(path).read_text, encoding="utf-8")

    async def write(self, path: str, text: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_text, text, encoding="utf-8")
        logger.debug(f"Wrote {path}")

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._resolve(path).unlink, missing_ok=True)
        logger.debug(f"Deleted {path}")

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)

    async def modified_time(self, path: str) -> float | None:
        try:
            stat = await asyncio.to_thread(self._resolve(path).stat)
        except FileNotFoundError:
            return None
        return stat.st_mtime

    async def ensure_folder(self, path: str) -> None:
        await asyncio.to_thread(self._resolve(path).mkdir, parents=True, exist_ok=True)
