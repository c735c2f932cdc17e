"""Persistence gateways."""

from finscope.core.config import StorageConfig
from finscope.core.data.storage.base import MemoryStore, PersistenceGateway
from finscope.core.data.storage.duckdb import DuckDBStore


def create_store(config: StorageConfig | None = None) -> PersistenceGateway:
    """Create the store selected by ``config.backend`` (``duckdb`` or ``memory``)."""
    config = config or StorageConfig()
    if config.backend == "memory":
        return MemoryStore()
    if config.backend == "duckdb":
        return DuckDBStore(config.path)
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = ["PersistenceGateway", "MemoryStore", "DuckDBStore", "create_store"]
