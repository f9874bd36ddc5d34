"""Async HTTP client for the external analyzer service.

``analyze_url`` issues a single ``POST /api/analyze`` and either returns a
parsed :class:`~webanalyzer.models.AnalysisResult` or raises one of the
:class:`AnalyzerError` subclasses below.  No retries are attempted.

Error taxonomy
--------------
``TransportError``   no response was received (connection refused, DNS, ...)
``AnalyzerTimeout``  the configured timeout elapsed before a response arrived
``ServerError``      a non-2xx response, or a 2xx body that is not a result
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import ValidationError

from webanalyzer.config import settings
from webanalyzer.models import AnalysisResult

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong"
TIMEOUT_MESSAGE = "The analyzer did not respond in time."

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "webanalyzer-form/0.1",
}


class AnalyzerError(Exception):
    """Base class for every failure reported by :func:`analyze_url`.

    ``message`` is the user-facing text shown in the form's failure panel.
    """

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class TransportError(AnalyzerError):
    """The analyzer could not be reached."""


class AnalyzerTimeout(TransportError):
    def __init__(self) -> None:
        super().__init__(TIMEOUT_MESSAGE)


class ServerError(AnalyzerError):
    """The analyzer answered, but not with a usable result."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _failure_message(response: httpx.Response) -> str:
    """Return the body's ``message`` field, or the generic fallback."""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE_MESSAGE
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return GENERIC_FAILURE_MESSAGE


def _parse_result(response: httpx.Response) -> AnalysisResult:
    try:
        return AnalysisResult.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        logger.warning("Analyzer returned a malformed result: %s", exc)
        raise ServerError(GENERIC_FAILURE_MESSAGE, response.status_code) from exc


async def _post(
    url: str,
    *,
    client: httpx.AsyncClient | None,
    endpoint: str,
    timeout: float | None,
) -> httpx.Response:
    # httpx applies ``timeout`` per phase (connect, read, write, pool); the
    # caller wraps this in an overall deadline.
    if client is None:
        async with httpx.AsyncClient(headers=_DEFAULT_HEADERS) as own_client:
            return await own_client.post(endpoint, json={"url": url}, timeout=timeout)
    return await client.post(endpoint, json={"url": url}, timeout=timeout)


async def analyze_url(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    endpoint: str | None = None,
    timeout: float | None = None,
) -> AnalysisResult:
    """Ask the analyzer service to analyse *url*.

    Args:
        url: The (already validated) page address to analyse.
        client: Optional shared ``httpx.AsyncClient``.  When omitted a
            short-lived client is opened for this call only.
        endpoint: Full ``/api/analyze`` URL.  Defaults to
            ``settings.analyze_endpoint``.
        timeout: Total seconds allowed for the exchange, from sending the
            request to receiving the full body; ``None`` waits indefinitely.

    Raises:
        AnalyzerTimeout: If *timeout* elapsed.
        TransportError: If no response was received.
        ServerError: On a non-2xx status or a malformed success body.
    """
    endpoint = endpoint or settings.analyze_endpoint
    logger.info("Submitting %s to %s", url, endpoint)

    try:
        response = await asyncio.wait_for(
            _post(url, client=client, endpoint=endpoint, timeout=timeout),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        logger.warning("Analyzer timed out for %s: %r", url, exc)
        raise AnalyzerTimeout() from exc
    except httpx.HTTPError as exc:
        logger.warning("Analyzer unreachable for %s: %s", url, exc)
        raise TransportError() from exc

    if not response.is_success:
        message = _failure_message(response)
        logger.info("Analyzer answered %s for %s: %s", response.status_code, url, message)
        raise ServerError(message, response.status_code)

    return _parse_result(response)
