"""Event sinks for result file loading and navigation.

Events are flat dicts: the payload minus ``None`` values, plus ``event`` and
``timestamp``. ``JSONLParseLogger`` appends them to one file per document per
logger session; ``MemoryParseLogger`` keeps them in a list for tests and
short-lived tools.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from src.core.logging_utils import make_session_stamp, resolve_log_path, utc_now_iso


class ParseObservationSink(Protocol):
    def log_event(self, document_id: str, event: str, payload: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


def build_event(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    entry = {key: value for key, value in payload.items() if value is not None}
    entry.setdefault("event", event)
    entry.setdefault("timestamp", utc_now_iso())
    return entry


@dataclass(slots=True)
class JSONLParseLogger(ParseObservationSink):
    """Appends events under *base_dir*, one file per document and session."""

    base_dir: Path
    session: str = field(default_factory=make_session_stamp)

    def path_for(self, document_id: str) -> Path:
        return resolve_log_path(self.base_dir, self.session, document_id)

    def log_event(self, document_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        target = self.path_for(document_id)
        target.parent.mkdir(parents=True, exist_ok=True)
        entry = build_event(event, payload)
        entry.setdefault("document_id", document_id)
        with target.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False) + "\n")


@dataclass(slots=True)
class MemoryParseLogger(ParseObservationSink):
    """Keeps events in memory in arrival order."""

    events: list[dict[str, Any]] = field(default_factory=list)

    def log_event(self, document_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        entry = build_event(event, payload)
        entry.setdefault("document_id", document_id)
        self.events.append(entry)
