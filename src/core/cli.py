"""Command-line inspector for annotated result files."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from src.core.cells import extract_record_cells
from src.core.config import Settings, load_settings
from src.core.logging_utils import configure_logging
from src.core.provider import ResultHintProvider, build_provider
from src.core.result_parser import list_markers, parse_result_text
from src.integrations.result_files import FileDocumentSource


@dataclass
class ResultInspector:
    """Runs one inspection command and writes its output."""

    provider: ResultHintProvider
    output_func: Callable[[str], None] = field(default=print)

    def parse(self, result_path: Path) -> int:
        records = parse_result_text(self._read(result_path))
        self._emit([record.to_dict() for record in records.values()])
        return 0

    def markers(self, result_path: Path) -> int:
        self._emit([marker.to_dict() for marker in list_markers(self._read(result_path))])
        return 0

    def cells(self, result_path: Path, line: int) -> int:
        record = parse_result_text(self._read(result_path)).get(line)
        if record is None:
            self.output_func(f"No record for line {line} in {result_path}")
            return 1
        self._emit(extract_record_cells(record))
        return 0

    def hover(self, sql_path: Path, line: int) -> int:
        markdown = self.provider.hover(sql_path, line)
        if markdown is None:
            self.output_func(f"No result recorded for {sql_path}:{line}")
            return 1
        self.output_func(markdown)
        return 0

    def locate(self, sql_path: Path, line: int) -> int:
        try:
            target = self.provider.go_to_result(sql_path, line)
        except (FileNotFoundError, LookupError) as exc:
            self.output_func(str(exc))
            return 1
        self.output_func(f"{target.path}:{target.line}")
        return 0

    def _read(self, path: Path) -> str:
        text = FileDocumentSource().read_text(path)
        if text is None:
            raise SystemExit(f"Result file not found: {path}")
        return text

    def _emit(self, payload: Any) -> None:
        self.output_func(json.dumps(payload, indent=2, ensure_ascii=False))


def _build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect annotated SQL result files")
    parser.add_argument("--config", default=None, help="Path to the YAML config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Print every record of a result file")
    parse_cmd.add_argument("path", type=Path, help="Path to the .result file")

    markers_cmd = commands.add_parser("markers", help="List markers with their physical lines")
    markers_cmd.add_argument("path", type=Path, help="Path to the .result file")

    cells_cmd = commands.add_parser("cells", help="Print the cell grid recorded for a SQL line")
    cells_cmd.add_argument("path", type=Path, help="Path to the .result file")
    cells_cmd.add_argument("--line", type=int, required=True, help="Line in the SQL script")

    hover_cmd = commands.add_parser("hover", help="Render the hover shown for a SQL line")
    hover_cmd.add_argument("path", type=Path, help="Path to the .sql file")
    hover_cmd.add_argument("--line", type=int, required=True, help="Line in the SQL script")

    locate_cmd = commands.add_parser("locate", help="Find the result-file line for a SQL line")
    locate_cmd.add_argument("path", type=Path, help="Path to the .sql file")
    locate_cmd.add_argument("--line", type=int, required=True, help="Line in the SQL script")
    return parser


def run(argv: Sequence[str] | None = None, output_func: Callable[[str], None] = print) -> int:
    args = _build_cli().parse_args(argv)
    configure_logging(debug=args.debug)

    settings = load_settings(args.config) if args.config else Settings()
    inspector = ResultInspector(provider=build_provider(settings), output_func=output_func)

    if args.command == "parse":
        return inspector.parse(args.path)
    if args.command == "markers":
        return inspector.markers(args.path)
    if args.command == "cells":
        return inspector.cells(args.path, args.line)
    if args.command == "hover":
        return inspector.hover(args.path, args.line)
    return inspector.locate(args.path, args.line)


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
