"""FastAPI service exposing result hints to editor clients."""

from __future__ import annotations

import argparse
import logging
from typing import Annotated, Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from src.core.cells import extract_cell_grid
from src.core.config import Settings, load_settings
from src.core.logging_utils import configure_logging, truncate_for_log
from src.core.provider import ResultHintProvider, build_provider
from src.core.result_parser import list_markers, parse_result_text


LOGGER = logging.getLogger(__name__)


class ParseRequest(BaseModel):
    text: str = Field("", description="Full text of an annotated result file")


class ParseResponse(BaseModel):
    records: list[dict[str, Any]]
    degraded_lines: list[int]


class MarkersResponse(BaseModel):
    markers: list[dict[str, Any]]


class CellsRequest(BaseModel):
    outcome_text: str = ""
    header_byte_length: int | None = Field(None, ge=0)
    row_byte_lengths: list[Annotated[int, Field(ge=0)]] | None = None


class CellsResponse(BaseModel):
    rows: list[list[str]]
    status: str
    reason: str | None = None


class HoverResponse(BaseModel):
    sql_path: str
    line: int
    markdown: str


class CodeLensPayload(BaseModel):
    line: int
    title: str
    command: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class CodeLensResponse(BaseModel):
    path: str
    lenses: list[CodeLensPayload]


class NavigationResponse(BaseModel):
    path: str
    line: int


def create_app(
    config_path: str | None = None,
    *,
    provider: ResultHintProvider | None = None,
) -> FastAPI:
    LOGGER.info("Initialising result hint service with config '%s'", config_path)
    settings = load_settings(config_path) if config_path else Settings()
    hint_provider = provider or build_provider(settings)

    app = FastAPI(title="SQL Result Hints", version="0.1.0")

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/parse", response_model=ParseResponse)
    def parse(payload: ParseRequest) -> ParseResponse:
        records = parse_result_text(payload.text)
        LOGGER.debug("Parsed %d record(s) from request body", len(records))
        return ParseResponse(
            records=[record.to_dict() for record in records.values()],
            degraded_lines=[line for line, record in records.items() if record.degradations],
        )

    @app.post("/api/markers", response_model=MarkersResponse)
    def markers(payload: ParseRequest) -> MarkersResponse:
        return MarkersResponse(markers=[marker.to_dict() for marker in list_markers(payload.text)])

    @app.post("/api/cells", response_model=CellsResponse)
    def cells(payload: CellsRequest) -> CellsResponse:
        extraction = extract_cell_grid(
            payload.outcome_text,
            payload.header_byte_length,
            payload.row_byte_lengths,
        )
        if extraction.status == "truncated":
            LOGGER.info("Cell extraction truncated: %s", extraction.reason)
        return CellsResponse(rows=extraction.rows, status=extraction.status, reason=extraction.reason)

    @app.get("/api/hover", response_model=HoverResponse)
    def hover(sql_path: str = Query(..., min_length=1), line: int = Query(..., ge=1)) -> HoverResponse:
        markdown = hint_provider.hover(sql_path, line)
        if markdown is None:
            LOGGER.debug("No hover for %s:%d", truncate_for_log(sql_path), line)
            raise HTTPException(status_code=404, detail="No result recorded for this line")
        return HoverResponse(sql_path=sql_path, line=line, markdown=markdown)

    @app.get("/api/code-lenses", response_model=CodeLensResponse)
    def code_lenses(path: str = Query(..., min_length=1)) -> CodeLensResponse:
        lenses = [CodeLensPayload(**lens.to_dict()) for lens in hint_provider.code_lenses(path)]
        return CodeLensResponse(path=path, lenses=lenses)

    @app.get("/api/navigate/result", response_model=NavigationResponse)
    def navigate_to_result(
        sql_path: str = Query(..., min_length=1),
        line: int = Query(..., ge=1),
    ) -> NavigationResponse:
        try:
            target = hint_provider.go_to_result(sql_path, line)
        except (FileNotFoundError, LookupError) as exc:
            LOGGER.warning("Navigation to result failed: %s", exc)
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return NavigationResponse(path=target.path, line=target.line)

    @app.get("/api/navigate/sql", response_model=NavigationResponse)
    def navigate_to_sql(
        result_path: str = Query(..., min_length=1),
        line: int = Query(..., ge=1),
    ) -> NavigationResponse:
        try:
            target = hint_provider.go_to_sql(result_path, line)
        except FileNotFoundError as exc:
            LOGGER.warning("Navigation to SQL failed: %s", exc)
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return NavigationResponse(path=target.path, line=target.line)

    @app.post("/api/documents/invalidate", status_code=204)
    def invalidate(sql_path: str = Query(..., min_length=1)) -> None:
        hint_provider.invalidate(sql_path)
        LOGGER.debug("Invalidated cached results for %s", sql_path)

    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the result hint service")
    parser.add_argument("--config", default=None, help="Path to configuration file")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind the server")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind the server")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    configure_logging(debug=args.debug)
    app = create_app(config_path=args.config)

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise SystemExit("uvicorn must be installed to run the result hint service") from exc

    LOGGER.info("Starting uvicorn on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
