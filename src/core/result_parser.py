"""Parser for annotated SQL result files.

A result file interleaves SQL statements with their recorded outcome. Each
statement is introduced by a marker line::

    #SQL[@<line>,N<sql_bytes>]Result[<header_bytes>, <row_bytes>, ...]
    #SQL[@<line>,N<sql_bytes>]Error[<error_bytes>]

``<line>`` is the 1-based line of the statement in the companion ``.sql``
script. Every length is a count of UTF-8 bytes, so slicing happens on the
encoded payload rather than on characters.

Parsing never raises for malformed content. Records that needed recovery are
tagged ``ParseStatus.DEGRADED`` and list the reasons.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal

MARKER_RE = re.compile(r"#SQL\[@(?P<line>\d+),N(?P<sql_len>\d+)\](?P<kind>Result|Error)\[(?P<info>[^\]]*)\]")
_MARKER_PREFIX_RE = re.compile(r"#SQL\[@(?P<line>\d+),N(?P<sql_len>\d+)\](?P<kind>Result|Error)\[")
_LEADING_INT_RE = re.compile(r"\d+")

MarkerKind = Literal["Result", "Error"]
OutcomeKind = Literal["result", "error", "empty"]


class ParseStatus(str, Enum):
    PARSED = "parsed"
    DEGRADED = "degraded"


@dataclass(frozen=True, slots=True)
class Degradation:
    """A recovery applied while parsing a record."""

    reason: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class RecordMetadata:
    """Structural lengths declared by a marker's info field."""

    header_byte_length: int | None = None
    row_byte_lengths: tuple[int, ...] | None = None
    result_length: int | None = None
    error_byte_length: int | None = None


@dataclass(frozen=True, slots=True)
class AnnotationRecord:
    source_line: int
    sql_byte_length: int
    kind: MarkerKind
    sql_text: str
    outcome_kind: OutcomeKind
    result_text: str | None = None
    error_text: str | None = None
    metadata: RecordMetadata = field(default_factory=RecordMetadata)
    degradations: tuple[Degradation, ...] = ()

    @property
    def status(self) -> ParseStatus:
        return ParseStatus.DEGRADED if self.degradations else ParseStatus.PARSED

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        metadata = payload["metadata"]
        if metadata["row_byte_lengths"] is not None:
            metadata["row_byte_lengths"] = list(metadata["row_byte_lengths"])
        payload["degradations"] = [dict(item) for item in payload["degradations"]]
        payload["status"] = self.status.value
        return payload


@dataclass(frozen=True, slots=True)
class MarkerInfo:
    """Marker position without the extracted statement body."""

    source_line: int
    sql_byte_length: int
    kind: MarkerKind
    physical_line: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_result_text(text: str) -> dict[int, AnnotationRecord]:
    """Parse *text* into records keyed by source line.

    When two markers declare the same source line the later one wins.
    """

    records: dict[int, AnnotationRecord] = {}
    for record in scan_records(text):
        records[record.source_line] = record
    return records


def scan_records(text: str) -> list[AnnotationRecord]:
    """Return one record per marker in file order."""

    matches = list(MARKER_RE.finditer(text))
    records: list[AnnotationRecord] = []
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
        records.append(_build_record(match, text[match.start() : end]))
    return records


def locate_record_line(text: str, source_line: int) -> int | None:
    """Return the 1-based physical line of the marker for *source_line*, or None."""

    for index, line in enumerate(text.split("\n")):
        match = _MARKER_PREFIX_RE.search(line)
        if match and int(match.group("line")) == source_line:
            return index + 1
    return None


def list_markers(text: str) -> list[MarkerInfo]:
    """Report every marker with the physical line it sits on."""

    markers: list[MarkerInfo] = []
    for index, line in enumerate(text.split("\n")):
        match = MARKER_RE.search(line)
        if not match:
            continue
        markers.append(
            MarkerInfo(
                source_line=int(match.group("line")),
                sql_byte_length=int(match.group("sql_len")),
                kind=match.group("kind"),  # type: ignore[arg-type]
                physical_line=index + 1,
            )
        )
    return markers


def _build_record(match: re.Match[str], section: str) -> AnnotationRecord:
    source_line = int(match.group("line"))
    sql_len = int(match.group("sql_len"))
    kind: MarkerKind = match.group("kind")  # type: ignore[assignment]
    info = match.group("info")

    degradations: list[Degradation] = []
    sql_text, outcome = _split_section(section, sql_len, degradations)

    if kind == "Result":
        metadata = _parse_result_metadata(info, degradations)
    else:
        metadata = _parse_error_metadata(info, degradations)

    outcome = outcome.strip()
    if not outcome:
        outcome_kind: OutcomeKind = "empty"
        if metadata.row_byte_lengths:
            degradations.append(Degradation("declared_rows_without_outcome", info.strip()))
    else:
        outcome_kind = "result" if kind == "Result" else "error"

    return AnnotationRecord(
        source_line=source_line,
        sql_byte_length=sql_len,
        kind=kind,
        sql_text=sql_text,
        outcome_kind=outcome_kind,
        result_text=outcome if outcome_kind == "result" else None,
        error_text=outcome if outcome_kind == "error" else None,
        metadata=metadata,
        degradations=tuple(degradations),
    )


def _split_section(section: str, sql_len: int, degradations: list[Degradation]) -> tuple[str, str]:
    newline = section.find("\n")
    if newline == -1:
        degradations.append(Degradation("marker_without_body"))
        return "", ""

    payload = section[newline + 1 :].lstrip("\r\n")
    if sql_len == 0:
        return payload.strip(), ""

    raw = payload.encode("utf-8")
    if sql_len > len(raw):
        degradations.append(
            Degradation("sql_length_exceeds_section", f"declared {sql_len}, available {len(raw)}")
        )
        return payload.strip(), ""

    sql_bytes = raw[:sql_len]
    try:
        sql_text = sql_bytes.decode("utf-8")
    except UnicodeDecodeError:
        degradations.append(Degradation("sql_length_splits_character", f"declared {sql_len}"))
        sql_text = sql_bytes.decode("utf-8", errors="replace")

    rest = raw[sql_len:]
    if rest.startswith(b";"):
        rest = rest[1:]
    if rest.startswith(b"\r\n"):
        rest = rest[2:]
    elif rest.startswith(b"\n"):
        rest = rest[1:]

    return sql_text.strip(), rest.decode("utf-8", errors="replace")


def _parse_length(value: str, degradations: list[Degradation]) -> int:
    if value.isdecimal():
        return int(value)
    match = _LEADING_INT_RE.match(value)
    degradations.append(Degradation("invalid_length", value))
    return int(match.group(0)) if match else 0


def _info_parts(info: str) -> list[str]:
    return [part.strip() for part in info.split(",") if part.strip()]


def _parse_result_metadata(info: str, degradations: list[Degradation]) -> RecordMetadata:
    parts = _info_parts(info)
    if not parts:
        return RecordMetadata()

    header = _parse_length(parts[0], degradations)
    rows = tuple(_parse_length(part, degradations) for part in parts[1:])
    result_length = 1 + len(rows)
    return RecordMetadata(
        header_byte_length=header,
        row_byte_lengths=rows or None,
        result_length=result_length if result_length > 1 else None,
    )


def _parse_error_metadata(info: str, degradations: list[Degradation]) -> RecordMetadata:
    parts = _info_parts(info)
    if not parts:
        return RecordMetadata()

    error_length = _parse_length(parts[0], degradations)
    return RecordMetadata(error_byte_length=error_length or None)


__all__ = [
    "AnnotationRecord",
    "Degradation",
    "MARKER_RE",
    "MarkerInfo",
    "ParseStatus",
    "RecordMetadata",
    "list_markers",
    "locate_record_line",
    "parse_result_text",
    "scan_records",
]
