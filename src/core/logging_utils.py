"""Logging setup and file naming for the JSONL event logs."""

from __future__ import annotations

import hashlib
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_-]+")


def make_session_stamp(now: datetime | None = None) -> str:
    """Return a sortable UTC stamp (millisecond precision) for one logging session."""

    moment = now or datetime.now(UTC)
    return moment.strftime("%Y%m%dT%H%M%S%f")[:-3]


def document_log_name(document_id: str) -> str:
    """Turn a document path into ``<basename-slug>-<path digest>``.

    The digest keeps ``a/x.sql`` and ``b/x.sql`` in separate files.
    """

    raw = document_id.strip()
    slug = _UNSAFE_FILENAME_RE.sub("-", Path(raw).name).strip("-") or "document"
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:8]
    return f"{slug}-{digest}"


def resolve_log_path(base_dir: Path, session: str, document_id: str) -> Path:
    return base_dir.expanduser() / f"{session}-{document_log_name(document_id)}.jsonl"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def configure_logging(debug: bool) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        if debug:
            root_logger.setLevel(logging.DEBUG)
        return
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def truncate_for_log(value: str, limit: int = 200) -> str:
    text = value.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
