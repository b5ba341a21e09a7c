"""Split a recorded result table into a grid of cells.

Cell values may contain newlines (pretty-printed JSON, for example), so the
outcome text cannot be split on line breaks. Each marker declares the byte
length of the header line and of every row; those spans isolate one logical
line at a time before it is split on the column delimiter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence

from src.core.result_parser import AnnotationRecord

COLUMN_DELIMITER = "  ¦  "

CellGrid = list[list[str]]


@dataclass(slots=True)
class CellExtraction:
    rows: CellGrid = field(default_factory=list)
    status: Literal["complete", "empty", "truncated"] = "complete"
    reason: str | None = None


def extract_cell_grid(
    outcome_text: str | None,
    header_byte_length: int | None,
    row_byte_lengths: Sequence[int] | None,
) -> CellExtraction:
    """Slice *outcome_text* by the declared byte lengths, header first."""

    if not header_byte_length or not row_byte_lengths:
        return CellExtraction(status="empty", reason="missing_lengths")
    if not outcome_text or not outcome_text.strip():
        return CellExtraction(status="empty", reason="no_outcome")

    buffer = outcome_text.encode("utf-8")
    rows: CellGrid = []
    offset = 0
    for index, length in enumerate([header_byte_length, *row_byte_lengths]):
        if length < 0:
            return CellExtraction(
                rows=rows,
                status="truncated",
                reason=f"line {index} declares a negative length ({length})",
            )
        if offset + length > len(buffer):
            return CellExtraction(
                rows=rows,
                status="truncated",
                reason=f"line {index} declares {length} bytes, {len(buffer) - offset} remain",
            )

        line = buffer[offset : offset + length].decode("utf-8", errors="replace")
        if line:
            rows.append(line.split(COLUMN_DELIMITER))

        offset += length
        if offset < len(buffer) and buffer[offset] == 0x0A:
            offset += 1

    return CellExtraction(rows=rows)


def extract_cells(
    outcome_text: str | None,
    header_byte_length: int | None,
    row_byte_lengths: Sequence[int] | None,
) -> CellGrid:
    """Return the cell grid for a result table; row 0 holds the headers."""

    return extract_cell_grid(outcome_text, header_byte_length, row_byte_lengths).rows


def extract_record_cells(record: AnnotationRecord) -> CellGrid:
    if record.outcome_kind != "result":
        return []
    metadata = record.metadata
    return extract_cells(record.result_text, metadata.header_byte_length, metadata.row_byte_lengths)


__all__ = [
    "COLUMN_DELIMITER",
    "CellExtraction",
    "CellGrid",
    "extract_cell_grid",
    "extract_cells",
    "extract_record_cells",
]
