from fieldservice.store.base import EntityStore
from fieldservice.store.json_file import JsonFileStore, storage_key
from fieldservice.store.memory import InMemoryStore

__all__ = ["EntityStore", "InMemoryStore", "JsonFileStore", "storage_key", "build_store"]


def build_store(config=None) -> EntityStore:
    """Create the store backend selected by configuration."""
    if config is None:
        from fieldservice.config import settings
        config = settings.store
    if config.backend == "json":
        return JsonFileStore(config.data_dir, config.key_prefix, config.key_version)
    return InMemoryStore()
