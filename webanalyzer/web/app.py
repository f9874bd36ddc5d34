"""FastAPI application factory for the single-page form.

Lifespan
--------
On startup the app opens one ``httpx.AsyncClient`` (shared across requests
via ``request.app.state.http``) for talking to the analyzer service.  On
shutdown it closes the client cleanly.

Routes
------
GET /            — the empty form
GET /?url=<url>  — submit the form and show the outcome
GET /health      — liveness probe
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from webanalyzer.config import settings
from webanalyzer.form import AnalyzerForm
from webanalyzer.render import render, render_html


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the outbound HTTP client on startup and close it on shutdown."""
    async with httpx.AsyncClient() as client:
        app.state.http = client
        yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Webpage Analyzer",
        description="Single-page form in front of the webpage analyzer service.",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request, url: str | None = None) -> HTMLResponse:
        """Render the form; submit it first when ``url`` is given."""
        async with AnalyzerForm(
            client=request.app.state.http,
            endpoint=settings.analyze_endpoint,
            timeout=settings.analyzer_timeout,
        ) as form:
            if url is not None:
                form.set_url(url)
                await form.submit()
            page = render_html(render(form.snapshot()))
        return HTMLResponse(page)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn webanalyzer.web.app:app --reload
app = create_app()
