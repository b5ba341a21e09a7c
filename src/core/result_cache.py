"""Per-SQL-file store for parsed result maps."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Protocol

from src.core.result_parser import AnnotationRecord

LOGGER = logging.getLogger(__name__)

RecordMap = dict[int, AnnotationRecord]


class ResultCache(Protocol):
    """Keeps the most recent parse for each SQL document."""

    def get(self, key: str) -> RecordMap | None:  # pragma: no cover - interface
        ...

    def put(self, key: str, value: RecordMap) -> None:  # pragma: no cover - interface
        ...

    def discard(self, key: str) -> None:  # pragma: no cover - interface
        ...


class BoundedResultCache(ResultCache):
    """Thread-safe FIFO cache; the oldest entry goes once *max_entries* is exceeded."""

    def __init__(self, max_entries: int = 100) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, RecordMap] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> RecordMap | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: RecordMap) -> None:
        with self._lock:
            self._entries[key] = value
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                LOGGER.debug("Evicted cached results for %s", evicted)

    def discard(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
