from typing import Protocol

from calloutdex.domain.callout import CalloutCache, CalloutItem


class CacheStore(Protocol):
    """Protocol for persisting the callout index."""

    vault_name: str

    async def load(self) -> CalloutCache | None:
        """Load the cache, or None if it is missing, corrupt or belongs elsewhere."""
        ...

    async def save(self, cache: CalloutCache) -> bool:
        """Persist the cache. Returns False instead of raising on failure."""
        ...

    def snapshot(
        self, callouts: list[CalloutItem], file_mod_times: dict[str, str]
    ) -> CalloutCache:
        """Build a cache snapshot stamped with this store's version and vault."""
        ...
