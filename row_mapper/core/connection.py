"""Connection settings and the pooled connection lifecycle."""

from __future__ import annotations

import importlib
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from row_mapper.core.enums import DatabaseBackend
from row_mapper.core.exceptions import AdapterError

logger = structlog.get_logger(__name__)

# backend -> "module:ClassName"; imported on demand so unused drivers cost nothing
_ADAPTERS: dict[DatabaseBackend, str] = {
    DatabaseBackend.SQLITE: "row_mapper.adapters.sqlite:SqliteSyncAdapter",
}


class ConnectionConfig(BaseModel):
    """Validated connection settings.

    ``extra`` is passed through to the driver's connect call untouched.
    """

    model_config = ConfigDict(frozen=True)

    driver: str
    database: str
    pool_size: int = Field(default=5, ge=1)
    pool_timeout: float = Field(default=30.0, gt=0)
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def backend(self) -> DatabaseBackend:
        try:
            return DatabaseBackend(self.driver.lower())
        except ValueError:
            raise AdapterError(f"Unsupported database driver: {self.driver}") from None


def load_adapter(config: ConnectionConfig) -> Any:
    """Instantiate the adapter registered for ``config.driver``."""
    target = _ADAPTERS[config.backend]
    module_path, _, class_name = target.partition(":")
    try:
        adapter_class = getattr(importlib.import_module(module_path), class_name)
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{config.driver}': {e}") from e
    return adapter_class()


class ConnectionManager:
    """Owns one adapter and its lazily created pool."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = load_adapter(config)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def _ensure_pool(self) -> Any:
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
            logger.debug("pool_created", driver=self.config.driver, size=self.config.pool_size)
        return self._pool

    def acquire(self) -> Any:
        """Check a connection out of the pool; hand it back with :meth:`release`."""
        return self._adapter.acquire_connection(self._ensure_pool())

    def release(self, connection: Any) -> None:
        if self._pool is None:
            # pool was closed while the connection was out
            connection.close()
            return
        self._adapter.release_connection(connection, self._pool)

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        connection = self.acquire()
        try:
            yield connection
        finally:
            self.release(connection)

    def close_pool(self) -> None:
        if self._pool is None:
            return
        self._adapter.close_pool(self._pool)
        self._pool = None
        logger.debug("pool_closed", driver=self.config.driver)
