from tests.fakes.fake_cache_store import FakeCacheStore
from tests.fakes.fake_document_store import FakeDocumentStore

__all__ = ["FakeCacheStore", "FakeDocumentStore"]
