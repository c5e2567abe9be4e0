from typing import Protocol


class DocumentStore(Protocol):
    """Protocol for the vault holding the text documents.

    Paths are vault-relative POSIX strings and stay stable for a session.
    """

    async def list_documents(self) -> list[str]:
        """List every markdown document, in a deterministic order."""
        ...

    async def list_files(self, extension: str) -> list[str]:
        """List every file with the given extension (e.g. ``.canvas``)."""
        ...

    async def read(self, path: str) -> str:
        """Read the full text of a file. Raises FileNotFoundError if it is gone."""
        ...

    async def write(self, path: str, text: str) -> None:
        """Create or overwrite a file."""
        ...

    async def delete(self, path: str) -> None:
        """Delete a file if it exists."""
        ...

    async def exists(self, path: str) -> bool:
        """Whether a file or folder exists."""
        ...

    async def modified_time(self, path: str) -> float | None:
        """Modification time (seconds since epoch), or None if the file is gone."""
        ...

    async def ensure_folder(self, path: str) -> None:
        """Create a folder and its parents if missing."""
        ...
