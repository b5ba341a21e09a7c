"""Editor-facing glue: hover text, code lenses and navigation between files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from src.core.config import Settings
from src.core.hover import build_hover_markdown
from src.core.observability import JSONLParseLogger, ParseObservationSink
from src.core.result_cache import BoundedResultCache, RecordMap, ResultCache
from src.core.result_parser import AnnotationRecord, list_markers, locate_record_line, parse_result_text
from src.integrations.result_files import DocumentSource, FileDocumentSource

LOGGER = logging.getLogger(__name__)

GO_TO_RESULT_COMMAND = "goToResult"
GO_TO_SQL_COMMAND = "goToSql"


@dataclass(frozen=True, slots=True)
class CodeLens:
    line: int
    title: str
    command: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    path: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ResultHintProvider:
    """Serves parsed result records to an editor, one SQL document at a time."""

    settings: Settings = field(default_factory=Settings)
    source: DocumentSource | None = None
    cache: ResultCache | None = None
    logger: ParseObservationSink | None = None

    def __post_init__(self) -> None:
        hints = self.settings.hints
        if self.source is None:
            self.source = FileDocumentSource(sql_suffix=hints.sql_suffix, result_suffix=hints.result_suffix)
        if self.cache is None:
            self.cache = BoundedResultCache(max_entries=hints.cache_max_entries)

    def load_records(self, sql_path: str | Path) -> RecordMap | None:
        """Return the parsed records for *sql_path*, or None without a result file."""

        assert self.source is not None and self.cache is not None  # set in __post_init__
        key = str(sql_path)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result_path = self.source.result_path_for(sql_path)
        text = self.source.read_text(result_path)
        if text is None:
            LOGGER.debug("No result file at %s", result_path)
            return None

        records = parse_result_text(text)
        self.cache.put(key, records)
        degraded = [record.source_line for record in records.values() if record.degradations]
        if degraded:
            LOGGER.warning("Recovered %d malformed record(s) in %s", len(degraded), result_path)
        self._log_event(
            key,
            "result_file_parsed",
            {
                "result_path": str(result_path),
                "record_count": len(records),
                "degraded_lines": degraded or None,
            },
        )
        return records

    def invalidate(self, sql_path: str | Path) -> None:
        assert self.cache is not None
        self.cache.discard(str(sql_path))

    def record_at(self, sql_path: str | Path, line: int) -> AnnotationRecord | None:
        records = self.load_records(sql_path)
        if not records:
            return None
        return records.get(line)

    def hover(self, sql_path: str | Path, line: int) -> str | None:
        hints = self.settings.hints
        if not hints.enabled:
            return None
        record = self.record_at(sql_path, line)
        if record is None:
            return None
        return build_hover_markdown(record, show_outcome=hints.show_outcome)

    def code_lenses(self, path: str | Path) -> list[CodeLens]:
        if not self.settings.hints.enabled:
            return []
        assert self.source is not None
        if self.source.is_result_file(path):
            return self._result_file_lenses(path)
        return self._sql_file_lenses(path)

    def _sql_file_lenses(self, sql_path: str | Path) -> list[CodeLens]:
        records = self.load_records(sql_path)
        if not records:
            return []

        lenses: list[CodeLens] = []
        for line, record in records.items():
            if record.outcome_kind == "empty":
                continue
            title = "View result" if record.outcome_kind == "result" else "View error"
            lenses.append(
                CodeLens(
                    line=line,
                    title=title,
                    command=GO_TO_RESULT_COMMAND,
                    arguments={"sql_path": str(sql_path), "source_line": line},
                )
            )
        return lenses

    def _result_file_lenses(self, result_path: str | Path) -> list[CodeLens]:
        assert self.source is not None
        text = self.source.read_text(result_path)
        if text is None:
            return []

        return [
            CodeLens(
                line=marker.physical_line,
                title=f"Go to line {marker.source_line}",
                command=GO_TO_SQL_COMMAND,
                arguments={"result_path": str(result_path), "source_line": marker.source_line},
            )
            for marker in list_markers(text)
            if marker.kind == "Result"
        ]

    def go_to_result(self, sql_path: str | Path, target: AnnotationRecord | int) -> NavigationTarget:
        """Resolve the result-file line holding the marker for *target*."""

        assert self.source is not None
        source_line = target.source_line if isinstance(target, AnnotationRecord) else int(target)
        result_path = self.source.result_path_for(sql_path)
        text = self.source.read_text(result_path)
        if text is None:
            raise FileNotFoundError(f"Result file not found: {result_path}")

        line = locate_record_line(text, source_line)
        if line is None:
            raise LookupError(f"No result recorded for line {source_line} in {result_path}")

        self._log_event(str(sql_path), "navigated_to_result", {"source_line": source_line, "line": line})
        return NavigationTarget(path=str(result_path), line=line)

    def go_to_sql(self, result_path: str | Path, source_line: int) -> NavigationTarget:
        assert self.source is not None
        sql_path = self.source.sql_path_for(result_path)
        if self.source.read_text(sql_path) is None:
            raise FileNotFoundError(f"SQL file not found: {sql_path}")

        self._log_event(str(sql_path), "navigated_to_sql", {"source_line": source_line})
        return NavigationTarget(path=str(sql_path), line=source_line)

    def _log_event(self, document_id: str, event: str, payload: dict[str, Any]) -> None:
        if self.logger is None:
            return
        try:
            self.logger.log_event(document_id, event, payload)
        except OSError:
            LOGGER.exception("Failed to record %s event for %s", event, document_id)


def build_provider(settings: Settings) -> ResultHintProvider:
    """Create a provider wired to the filesystem based on *settings*."""

    logger: ParseObservationSink | None = None
    if settings.paths and settings.paths.event_logs_dir:
        logs_dir = Path(settings.paths.event_logs_dir).expanduser()
        logs_dir.mkdir(parents=True, exist_ok=True)
        logger = JSONLParseLogger(base_dir=logs_dir)
    return ResultHintProvider(settings=settings, logger=logger)
