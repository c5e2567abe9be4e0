import asyncio
import json
import time
from pathlib import Path

from loguru import logger

from calloutdex.cache.base import CacheStore
from calloutdex.domain.callout import CalloutCache, CalloutItem

CACHE_VERSION = "2.0"


class LocalCacheStore(CacheStore):
    """Callout cache persisted as a single JSON file.

    Reads and writes go through one lock, so a load never observes a
    half-written file and only one save is in flight at a time.
    """

    def __init__(
        self,
        filepath: str | Path | None,
        *,
        vault_name: str,
        version: str = CACHE_VERSION,
    ) -> None:
        """Initialize LocalCacheStore.

        Args:
            filepath: Path of the cache file. If not provided, load() always
                     misses and save() raises.
            vault_name: Identity of the vault; caches from other vaults are ignored
            version: Schema version written to and required from the file
        """
        self._filepath = Path(filepath) if filepath else None
        self.vault_name = vault_name
        self.version = version
        self._lock = asyncio.Lock()

    @property
    def filepath(self) -> Path | None:
        return self._filepath

    def snapshot(
        self, callouts: list[CalloutItem], file_mod_times: dict[str, str]
    ) -> CalloutCache:
        return CalloutCache(
            version=self.version,
            timestamp=time.time(),
            vault_name=self.vault_name,
            callouts=callouts,
            file_mod_times=file_mod_times,
        )

    async def load(self) -> CalloutCache | None:
        async with self._lock:
            return await asyncio.to_thread(self._read)

    def _read(self) -> CalloutCache | None:
        if not self._filepath or not self._filepath.exists():
            logger.debug("Cache file does not exist")
            return None

        try:
            with open(self._filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            cache = CalloutCache.model_validate(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read cache file, will regenerate: {e}")
            return None

        if cache.version != self.version:
            logger.info(f"Cache version mismatch ({cache.version} != {self.version})")
            return None
        if cache.vault_name != self.vault_name:
            logger.info(f"Cache belongs to vault {cache.vault_name!r}, not {self.vault_name!r}")
            return None

        logger.debug(f"Loaded {len(cache.callouts)} callouts from {self._filepath}")
        return cache

    async def save(self, cache: CalloutCache) -> bool:
        if not self._filepath:
            raise ValueError("No filepath set during initialization")

        async with self._lock:
            try:
                await asyncio.to_thread(self._write, cache)
            except Exception as e:
                logger.error(f"Failed to save callout cache: {e}")
                return False

        logger.info(f"Saved {len(cache.callouts)} callouts to {self._filepath}")
        return True

    def _write(self, cache: CalloutCache) -> None:
        assert self._filepath is not None
        self._filepath.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._filepath.with_suffix(self._filepath.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(cache.model_dump_json(indent=2))
        tmp_path.replace(self._filepath)
