"""Hover rendering for annotated results."""

from __future__ import annotations

from src.core.cells import CellGrid, extract_record_cells
from src.core.result_parser import AnnotationRecord

NO_DATA_PLACEHOLDER = "*No data*"

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
    ("\n", "<br>"),
)


def escape_html(text: str) -> str:
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def render_table_html(grid: CellGrid) -> str:
    """Render *grid* as an HTML table; row 0 becomes the header."""

    if not grid or not grid[0]:
        return NO_DATA_PLACEHOLDER

    headers, rows = grid[0], grid[1:]
    lines = ['<table border="1" cellpadding="8" cellspacing="0">', "<thead>", "<tr>"]
    lines.extend(f'<th bgcolor="#f0f0f0">{escape_html(header)}</th>' for header in headers)
    lines.extend(["</tr>", "</thead>", "<tbody>"])
    for row in rows:
        lines.append("<tr>")
        for cell in row:
            if "\n" in cell:
                # <br> from escape_html keeps line breaks inside <pre>
                lines.append(
                    f'<td><pre style="white-space: pre; overflow-x: auto;">{escape_html(cell)}</pre></td>'
                )
            else:
                lines.append(f"<td>{escape_html(cell)}</td>")
        lines.append("</tr>")
    lines.extend(["</tbody>", "</table>"])
    return "\n".join(lines)


def _code_block(text: str) -> str:
    return f"```text\n{text}\n```\n"


def build_hover_markdown(record: AnnotationRecord, *, show_outcome: bool = True) -> str | None:
    """Return hover markdown for *record*, or None when there is nothing to show."""

    if not show_outcome:
        return None

    if record.outcome_kind == "result" and record.result_text:
        grid = extract_record_cells(record)
        if grid:
            return render_table_html(grid)
        return "\nExpected result:\n" + _code_block(record.result_text)

    if record.outcome_kind == "error" and record.error_text:
        return "\nExpected error:\n" + _code_block(record.error_text)

    if record.outcome_kind == "empty":
        return "\nExpected result: empty\n"

    return None
