"""The analyzer form component.

``AnalyzerForm`` owns the raw URL input, the inline validation error and the
request lifecycle (``Idle -> Submitting -> Succeeded | Failed``).  Hosts (the
CLI and the web page) feed it user events through :meth:`set_url` and
:meth:`submit` and display ``render(form.snapshot())``.

Ordering
--------
Every submission that passes validation takes the next sequence number and
cancels the request it supersedes.  A completion is applied only while its
sequence number is still the latest one, so a slow, stale response can never
overwrite the state produced by a later submission.  After :meth:`close` no
completion touches the form at all.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from webanalyzer.client import GENERIC_FAILURE_MESSAGE, AnalyzerError, analyze_url
from webanalyzer.models import (
    Failed,
    FormSnapshot,
    Idle,
    RequestState,
    Submitting,
    Succeeded,
)
from webanalyzer.validation import INVALID_URL_MESSAGE, is_analyzable_url

logger = logging.getLogger(__name__)


class FormClosedError(RuntimeError):
    """Raised when :meth:`AnalyzerForm.submit` is called after ``close()``."""


class AnalyzerForm:
    """Single-page form that submits one URL at a time to the analyzer."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        endpoint: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._timeout = timeout

        self.url: str = ""
        self.validation_error: str | None = None
        self._state: RequestState = Idle()

        self._seq = 0
        self._inflight: asyncio.Task | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return isinstance(self._state, Submitting)

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> FormSnapshot:
        return FormSnapshot(
            url=self.url,
            validation_error=self.validation_error,
            state=self._state,
        )

    # ------------------------------------------------------------------
    # User events
    # ------------------------------------------------------------------
    def set_url(self, new_value: str) -> None:
        """Replace the input.  Validation only runs on submit."""
        self.url = new_value

    async def submit(self) -> RequestState:
        """Validate the input and, if it is acceptable, analyse it.

        Returns the request state in force once this call is done.  For a
        submission that was superseded by a later one, that is whatever the
        later submission has produced so far.

        Raises:
            FormClosedError: If the form has been closed.
        """
        if self._closed:
            raise FormClosedError("AnalyzerForm is closed")

        if not is_analyzable_url(self.url):
            self.validation_error = INVALID_URL_MESSAGE
            return self._state

        self.validation_error = None
        self._seq += 1
        seq = self._seq
        self._cancel_inflight()
        self._state = Submitting()

        task = asyncio.ensure_future(
            analyze_url(
                self.url,
                client=self._client,
                endpoint=self._endpoint,
                timeout=self._timeout,
            )
        )
        self._inflight = task

        try:
            # asyncio.wait never raises for the task's own outcome, so a
            # cancellation seen here always targets this coroutine.
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            if self._is_current(seq):
                self._state = Idle()
                self._inflight = None
            raise

        if not self._is_current(seq):
            outcome = "cancelled" if task.cancelled() else repr(task.exception())
            logger.debug("Discarding stale response for request #%d (%s)", seq, outcome)
            return self._state

        self._inflight = None
        self._apply(task)
        return self._state

    async def close(self) -> None:
        """Tear the form down, cancelling any in-flight request."""
        if self._closed:
            return
        self._closed = True
        task = self._inflight
        self._inflight = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})

    async def __aenter__(self) -> AnalyzerForm:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._seq

    def _cancel_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Cancelling superseded request #%d", self._seq - 1)
            self._inflight.cancel()
        self._inflight = None

    def _apply(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._state = Idle()
            return
        exc = task.exception()
        if exc is None:
            self._state = Succeeded(task.result())
        elif isinstance(exc, AnalyzerError):
            self._state = Failed(exc.message)
        else:
            self._state = Failed(GENERIC_FAILURE_MESSAGE)
            raise exc
