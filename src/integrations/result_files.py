"""Filesystem access for SQL scripts and their annotated result files.

A script ``cases/basic.sql`` pairs with ``cases/basic.result`` in the same
directory. This module is the only place that reads those files; the parser
works on text it is handed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class DocumentSource(Protocol):
    """Locates and loads the companion files of a SQL script."""

    def result_path_for(self, sql_path: str | Path) -> Path:  # pragma: no cover - interface
        ...

    def sql_path_for(self, result_path: str | Path) -> Path:  # pragma: no cover - interface
        ...

    def is_result_file(self, path: str | Path) -> bool:  # pragma: no cover - interface
        ...

    def read_text(self, path: str | Path) -> str | None:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class ResultFileLocator:
    """Maps between script and result paths by swapping the suffix."""

    sql_suffix: str = ".sql"
    result_suffix: str = ".result"

    def result_path_for(self, sql_path: str | Path) -> Path:
        path = Path(sql_path)
        return path.with_name(f"{path.stem}{self.result_suffix}")

    def sql_path_for(self, result_path: str | Path) -> Path:
        path = Path(result_path)
        return path.with_name(f"{path.stem}{self.sql_suffix}")

    def is_result_file(self, path: str | Path) -> bool:
        return Path(path).suffix == self.result_suffix


@dataclass(slots=True)
class FileDocumentSource(ResultFileLocator):
    """Reads documents from disk; missing files come back as None."""

    encoding: str = "utf-8"

    def read_text(self, path: str | Path) -> str | None:
        target = Path(path).expanduser()
        if not target.is_file():
            return None
        # newline="" keeps \r\n intact so declared byte lengths still line up;
        # undecodable bytes become U+FFFD so a damaged file still renders
        with target.open("r", encoding=self.encoding, errors="replace", newline="") as handle:
            return handle.read()
