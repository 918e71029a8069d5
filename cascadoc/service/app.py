"""FastAPI application serving live previews of rendered documents."""

from __future__ import annotations

import asyncio
import html
from typing import Callable

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from pydantic import BaseModel

from .. import patterns
from ..converter import Converter
from ..logging import get_logger
from ..models import BuildContext

logger = get_logger("service")


class HealthResponse(BaseModel):
    status: str


def render_index(identifiers: list[str]) -> str:
    """Return an HTML page linking every cached document."""
    items = "\n".join(
        f'<li><a href="/{html.escape(identifier)}">{html.escape(identifier)}</a></li>'
        for identifier in sorted(identifiers)
    )
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\"><title>cascadoc preview</title>"
        f"</head>\n<body>\n<ul>\n{items}\n</ul>\n</body></html>\n"
    )


def create_app(
    context: BuildContext,
    converter_factory: Callable[[], Converter] | None = None,
) -> FastAPI:
    """Create the preview application over the shared build cache."""

    converter = converter_factory() if converter_factory else Converter(context)
    app = FastAPI(title="cascadoc preview", version="1.0.0")

    def _build(identifier: str) -> int:
        return converter.build(identifier, {}, preload=True)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/")
    async def index() -> Response:
        return HTMLResponse(render_index(context.cache.keys()))

    @app.get("/{document_path:path}")
    async def document(document_path: str) -> Response:
        identifier = context.identifier(context.working_root / document_path)
        if not identifier:
            return HTMLResponse(render_index(context.cache.keys()))

        source = context.working_root / identifier
        if (
            identifier.startswith("..")
            or not source.exists()
            or not patterns.is_source(source.name)
        ):
            return PlainTextResponse(f"Not found: /{document_path}\n", status_code=404)

        body = context.cache.body(identifier)
        if body is None:
            logger.info("Preview cache miss for %s", identifier)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:  # pragma: no cover - fallback path when not in async context
                status = _build(identifier)
            else:
                status = await loop.run_in_executor(None, _build, identifier)
            body = context.cache.body(identifier)
            if body is None:
                return PlainTextResponse(
                    f"Build failed for {identifier} (exit {status})\n", status_code=500
                )
        return HTMLResponse(body)

    return app


def run_service(app: FastAPI, host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(app, host=host, port=port)
