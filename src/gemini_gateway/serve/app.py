"""FastAPI gateway in front of the Generative Language API.

Endpoints:
- GET  /
- GET  /health
- POST /generate   { "prompt": "...", "history": [{"role": "user", "content": "..."}] }
- POST /exportPDF  { "content": "..." }
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from gemini_gateway.common.config import GatewayConfig
from gemini_gateway.common.schema import ExportIn, GenerateIn, GenerateOut
from gemini_gateway.common.timing import wait
from gemini_gateway.export.pdf import render_pdf
from gemini_gateway.upstream.dispatcher import ModelDispatcher
from gemini_gateway.upstream.envelope import extract_text
from gemini_gateway.upstream.errors import GenerationError

LOGGER = logging.getLogger("gemini_gateway.app")

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
BUSY_MESSAGE = "The AI is currently receiving too much traffic. Please try again in a moment."


def create_app(
    config: GatewayConfig,
    client: httpx.Client | None = None,
    sleep: Callable[[int], None] = wait,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Gateway settings (API key, model queue, delays).
        client: HTTP client for upstream calls; one is created and owned by
            the app when omitted.
        sleep: Delay function handed to the dispatcher.
    """
    owns_client = client is None
    http_client = client if client is not None else httpx.Client()
    dispatcher = ModelDispatcher(config, http_client, sleep=sleep)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        LOGGER.info("Using model queue: %s", ", ".join(config.model_queue))
        yield
        if owns_client:
            http_client.close()

    app = FastAPI(title="Gemini Gateway", version="0.1.0", lifespan=lifespan)

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        LOGGER.info("Rejected request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/", include_in_schema=False)
    def index() -> Response:
        page = STATIC_DIR / "index.html"
        if page.is_file():
            return FileResponse(page)
        return JSONResponse({"status": "ok"})

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "models": list(config.model_queue)}

    @app.post("/generate", response_model=GenerateOut)
    def generate(body: GenerateIn) -> Response | GenerateOut:
        if not body.prompt:
            return JSONResponse(status_code=400, content={"error": "Prompt missing"})

        try:
            result = dispatcher.generate(body.prompt, body.history)
            text = extract_text(result.payload)
        except GenerationError as e:
            LOGGER.error("Final error: %s", e)
            return JSONResponse(status_code=500, content={"error": str(e), "response": BUSY_MESSAGE})

        return GenerateOut(response=text, model=result.model)

    @app.post("/exportPDF")
    def export_pdf(body: ExportIn) -> Response:
        if not body.content:
            return JSONResponse(status_code=400, content={"error": "No content provided"})

        try:
            pdf_bytes = render_pdf(body.content)
        except Exception as e:
            LOGGER.error("PDF export failed: %s", e)
            return JSONResponse(status_code=500, content={"error": str(e)})

        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": "attachment; filename=export.pdf"},
        )

    return app
