"""Key-value state shared by all Adaptive Fade operations.

Snapshots, fade windows and the adaptive-lighting registry all live in one
flat key-value store, addressed by keys built from the device identifier.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from homeassistant.helpers.storage import Store

from .const import STORAGE_SAVE_DELAY_S
from .errors import StateStoreUnavailable

_LOGGER = logging.getLogger(__name__)


class StateStore(ABC):
    """Process-wide key-value store.

    Every ``set`` replaces the whole value for its key, so readers never see a
    partially written field.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default*."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""


class MemoryStateStore(StateStore):
    """Dict-backed store with no persistence."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class PersistentStateStore(StateStore):
    """Store persisted through Home Assistant's ``helpers.storage``.

    Writes update the in-memory copy immediately and schedule a delayed save,
    so callers never wait on disk I/O.
    """

    def __init__(self, store: Store[dict[str, Any]]) -> None:
        self.store = store
        self._data: dict[str, Any] | None = None

    @property
    def loaded(self) -> bool:
        """True once the backing data has been loaded."""
        return self._data is not None

    async def async_load(self) -> None:
        """Load persisted data from disk."""
        self._data = await self.store.async_load() or {}
        _LOGGER.debug("Loaded %d stored keys", len(self._data))

    async def async_flush(self) -> None:
        """Write the current data to disk immediately."""
        if self._data is not None:
            await self.store.async_save(self._data)

    def close(self) -> None:
        """Drop the in-memory data; later access raises StateStoreUnavailable."""
        self._data = None

    def _require_data(self) -> dict[str, Any]:
        if self._data is None:
            raise StateStoreUnavailable("State store is not loaded")
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._require_data().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._require_data()
        data[key] = value
        self.store.async_delay_save(lambda: data, STORAGE_SAVE_DELAY_S)
