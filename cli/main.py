"""Webpage Analyzer CLI — terminal host for the analyzer form.

Usage:
    python cli/main.py --help

Commands:
    analyze      → submit one URL and print the summary
    interactive  → prompt loop reproducing the form
    serve        → run the single-page web form with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from webanalyzer.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
import logging
from typing import Optional

import typer

from webanalyzer.config import settings
from webanalyzer.form import AnalyzerForm
from webanalyzer.models import Failed, Succeeded
from webanalyzer.render import render, render_text

EXIT_FAILED = 1
EXIT_INVALID_URL = 2

app = typer.Typer(
    name="webanalyzer",
    help="Submit webpages to the analyzer service and show the summary.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP activity."),
) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _endpoint(base_url: Optional[str]) -> str:
    if base_url is None:
        return settings.analyze_endpoint
    return base_url.rstrip("/") + "/api/analyze"


def _timeout(timeout: Optional[float]) -> Optional[float]:
    if timeout is None:
        return settings.analyzer_timeout
    return timeout if timeout > 0 else None


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------
async def _analyze_once(url: str, endpoint: str, timeout: Optional[float]) -> AnalyzerForm:
    async with AnalyzerForm(endpoint=endpoint, timeout=timeout) as form:
        form.set_url(url)
        await form.submit()
        return form


@app.command("analyze")
def analyze(
    url: str = typer.Argument(..., help="Absolute http(s) URL of the page to analyse."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Analyzer service address (default: ANALYZER_BASE_URL)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the analyzer; 0 waits forever."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Analyse a single webpage."""
    form = asyncio.run(_analyze_once(url, _endpoint(base_url), _timeout(timeout)))

    if form.validation_error:
        typer.echo(render_text(render(form.snapshot())), err=True)
        raise typer.Exit(EXIT_INVALID_URL)

    state = form.state
    if isinstance(state, Succeeded) and as_json:
        typer.echo(json.dumps(state.result.to_wire(), indent=2, ensure_ascii=False))
        return

    output = render_text(render(form.snapshot()))
    if isinstance(state, Failed):
        typer.echo(output, err=True)
        raise typer.Exit(EXIT_FAILED)
    typer.echo(output)


# ---------------------------------------------------------------------------
# interactive
# ---------------------------------------------------------------------------
async def _interactive_loop(endpoint: str, timeout: Optional[float]) -> None:
    async with AnalyzerForm(endpoint=endpoint, timeout=timeout) as form:
        while True:
            try:
                raw = typer.prompt("URL", default="", show_default=False)
            except typer.Abort:
                break
            if not raw.strip():
                break
            form.set_url(raw)
            typer.echo("Analyzing …")
            await form.submit()
            typer.echo(render_text(render(form.snapshot())))
            typer.echo("")


@app.command("interactive")
def interactive(
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Analyzer service address (default: ANALYZER_BASE_URL)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the analyzer; 0 waits forever."
    ),
) -> None:
    """Prompt for URLs until an empty line or EOF."""
    typer.echo("Webpage Analyzer — enter a URL (empty line to quit).")
    asyncio.run(_interactive_loop(_endpoint(base_url), _timeout(timeout)))


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: WEB_HOST)."),
    port: Optional[int] = typer.Option(None, help="Bind port (default: WEB_PORT)."),
) -> None:
    """Serve the single-page web form."""
    import uvicorn

    bind_host = host or settings.web_host
    bind_port = port or settings.web_port
    typer.echo(f"[serve] Webpage Analyzer on http://{bind_host}:{bind_port}/")
    uvicorn.run("webanalyzer.web.app:app", host=bind_host, port=bind_port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
