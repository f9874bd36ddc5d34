"""Tests for the AnalyzerForm request lifecycle.

HTTP-level behaviour is exercised through ``respx``.  The ordering and
cancellation tests replace ``webanalyzer.form.analyze_url`` with small async
fakes gated on ``asyncio.Event`` so that completion order is deterministic.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from webanalyzer.client import (
    GENERIC_FAILURE_MESSAGE,
    TIMEOUT_MESSAGE,
    ServerError,
)
from webanalyzer.form import AnalyzerForm, FormClosedError
from webanalyzer.models import AnalysisResult, Failed, Idle, Submitting, Succeeded
from webanalyzer.validation import INVALID_URL_MESSAGE

# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

ENDPOINT = "http://analyzer.test/api/analyze"

RESULT_BODY = {
    "htmlVersion": "HTML5",
    "title": "Example Domain",
    "headings": {"h1": 1, "h2": 3},
    "hasLoginForm": True,
    "internalLinks": 10,
    "externalLinks": 5,
    "accessibleExternalLinks": 4,
    "brokenExternalLinks": 1,
}


def _result(title: str) -> AnalysisResult:
    return AnalysisResult.model_validate(dict(RESULT_BODY, title=title))


async def _let_requests_start() -> None:
    """Yield until the submit coroutine and its request task have both run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture()
def form() -> AnalyzerForm:
    return AnalyzerForm(endpoint=ENDPOINT)


# ---------------------------------------------------------------------------
# Input & validation
# ---------------------------------------------------------------------------

class TestInput:
    def test_initial_state(self, form: AnalyzerForm) -> None:
        assert form.url == ""
        assert form.validation_error is None
        assert form.state == Idle()
        assert form.is_busy is False

    def test_set_url_replaces_without_validating(self, form: AnalyzerForm) -> None:
        form.set_url("not a url")
        form.set_url("still not a url")
        assert form.url == "still not a url"
        assert form.validation_error is None

    async def test_invalid_url_sets_error_and_issues_no_request(
        self, form: AnalyzerForm
    ) -> None:
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(ENDPOINT).mock(
                return_value=httpx.Response(200, json=RESULT_BODY)
            )
            form.set_url("javascript:alert(1)")
            state = await form.submit()

        assert route.call_count == 0
        assert form.validation_error == INVALID_URL_MESSAGE
        assert state == Idle()

    async def test_invalid_url_keeps_previous_state(self, form: AnalyzerForm) -> None:
        with respx.mock:
            respx.post(ENDPOINT).mock(return_value=httpx.Response(200, json=RESULT_BODY))
            form.set_url("https://example.com")
            await form.submit()

            form.set_url("example.com")
            await form.submit()

        assert form.validation_error == INVALID_URL_MESSAGE
        assert isinstance(form.state, Succeeded)

    async def test_editing_does_not_clear_validation_error(
        self, form: AnalyzerForm
    ) -> None:
        form.set_url("ftp://example.com")
        await form.submit()
        form.set_url("https://example.com")
        assert form.validation_error == INVALID_URL_MESSAGE

    async def test_valid_submit_clears_validation_error(self, form: AnalyzerForm) -> None:
        form.set_url("not a url")
        await form.submit()
        with respx.mock:
            respx.post(ENDPOINT).mock(return_value=httpx.Response(200, json=RESULT_BODY))
            form.set_url("https://example.com")
            await form.submit()

        assert form.validation_error is None


# ---------------------------------------------------------------------------
# Request lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    async def test_success_transitions_through_submitting(
        self, form: AnalyzerForm
    ) -> None:
        seen: list[object] = []

        def _respond(request: httpx.Request) -> httpx.Response:
            seen.append(form.state)
            return httpx.Response(200, json=RESULT_BODY)

        with respx.mock:
            route = respx.post(ENDPOINT).mock(side_effect=_respond)
            form.set_url("https://example.com")
            state = await form.submit()

        assert route.call_count == 1
        assert seen == [Submitting()]
        assert state == Succeeded(AnalysisResult.model_validate(RESULT_BODY))
        assert form.is_busy is False

    async def test_server_message_becomes_failure(self, form: AnalyzerForm) -> None:
        with respx.mock:
            respx.post(ENDPOINT).mock(
                return_value=httpx.Response(504, json={"message": "timeout"})
            )
            form.set_url("https://example.com")
            state = await form.submit()

        assert state == Failed("timeout")

    async def test_empty_failure_body_uses_fallback(self, form: AnalyzerForm) -> None:
        with respx.mock:
            respx.post(ENDPOINT).mock(return_value=httpx.Response(500))
            form.set_url("https://example.com")
            state = await form.submit()

        assert state == Failed("Something went wrong")

    async def test_network_failure_uses_fallback(self, form: AnalyzerForm) -> None:
        with respx.mock:
            respx.post(ENDPOINT).mock(side_effect=httpx.ConnectError)
            form.set_url("https://example.com")
            state = await form.submit()

        assert state == Failed(GENERIC_FAILURE_MESSAGE)

    async def test_timeout_is_distinguishable(self) -> None:
        form = AnalyzerForm(endpoint=ENDPOINT, timeout=0.5)
        with respx.mock:
            respx.post(ENDPOINT).mock(side_effect=httpx.ReadTimeout)
            form.set_url("https://example.com")
            state = await form.submit()

        assert state == Failed(TIMEOUT_MESSAGE)

    async def test_resubmit_after_failure_and_success(self, form: AnalyzerForm) -> None:
        with respx.mock:
            respx.post(ENDPOINT).mock(
                side_effect=[
                    httpx.Response(500, json={"message": "upstream down"}),
                    httpx.Response(200, json=RESULT_BODY),
                    httpx.Response(500),
                ]
            )
            form.set_url("https://example.com")
            assert await form.submit() == Failed("upstream down")
            assert isinstance(await form.submit(), Succeeded)
            assert await form.submit() == Failed(GENERIC_FAILURE_MESSAGE)

    async def test_new_submission_drops_previous_result(
        self, form: AnalyzerForm, monkeypatch
    ) -> None:
        gate = asyncio.Event()

        async def _fake(url, **kwargs):
            if url.endswith("/slow"):
                await gate.wait()
            return _result(url)

        monkeypatch.setattr("webanalyzer.form.analyze_url", _fake)
        form.set_url("https://example.com/fast")
        await form.submit()
        assert isinstance(form.state, Succeeded)

        form.set_url("https://example.com/slow")
        pending = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        assert form.state == Submitting()
        assert form.is_busy is True

        gate.set()
        assert await pending == Succeeded(_result("https://example.com/slow"))

    async def test_unexpected_error_leaves_submitting(
        self, form: AnalyzerForm, monkeypatch
    ) -> None:
        async def _boom(url, **kwargs):
            raise RuntimeError("bug")

        monkeypatch.setattr("webanalyzer.form.analyze_url", _boom)
        form.set_url("https://example.com")
        with pytest.raises(RuntimeError):
            await form.submit()

        assert form.state == Failed(GENERIC_FAILURE_MESSAGE)


# ---------------------------------------------------------------------------
# Ordering, cancellation & teardown
# ---------------------------------------------------------------------------

class TestOrdering:
    async def test_latest_submission_wins(self, form: AnalyzerForm, monkeypatch) -> None:
        first_gate = asyncio.Event()
        started: list[str] = []

        async def _fake(url, **kwargs):
            started.append(url)
            if url.endswith("/first"):
                await first_gate.wait()
            return _result(url)

        monkeypatch.setattr("webanalyzer.form.analyze_url", _fake)

        form.set_url("https://example.com/first")
        first = asyncio.create_task(form.submit())
        await _let_requests_start()

        form.set_url("https://example.com/second")
        second_state = await form.submit()
        first_gate.set()
        first_state = await first

        latest = Succeeded(_result("https://example.com/second"))
        assert second_state == latest
        assert first_state == latest
        assert form.state == latest
        assert started[-1] == "https://example.com/second"

    async def test_stale_failure_does_not_override(self, form: AnalyzerForm, monkeypatch) -> None:
        first_gate = asyncio.Event()

        async def _fake(url, **kwargs):
            if url.endswith("/first"):
                # Ignores cancellation and completes late anyway.
                try:
                    await first_gate.wait()
                except asyncio.CancelledError:
                    await first_gate.wait()
                raise ServerError("stale", 500)
            return _result(url)

        monkeypatch.setattr("webanalyzer.form.analyze_url", _fake)

        form.set_url("https://example.com/first")
        first = asyncio.create_task(form.submit())
        await _let_requests_start()
        form.set_url("https://example.com/second")
        await form.submit()
        first_gate.set()
        await first

        assert form.state == Succeeded(_result("https://example.com/second"))

    async def test_superseded_request_is_cancelled(self, form: AnalyzerForm, monkeypatch) -> None:
        cancelled = asyncio.Event()

        async def _fake(url, **kwargs):
            if url.endswith("/first"):
                try:
                    await asyncio.Event().wait()
                except asyncio.CancelledError:
                    cancelled.set()
                    raise
            return _result(url)

        monkeypatch.setattr("webanalyzer.form.analyze_url", _fake)

        form.set_url("https://example.com/first")
        first = asyncio.create_task(form.submit())
        await _let_requests_start()
        form.set_url("https://example.com/second")
        await form.submit()
        await first

        assert cancelled.is_set()

    async def test_close_prevents_late_mutation(self, form: AnalyzerForm, monkeypatch) -> None:
        async def _never(url, **kwargs):
            await asyncio.Event().wait()

        monkeypatch.setattr("webanalyzer.form.analyze_url", _never)

        form.set_url("https://example.com")
        pending = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        await form.close()
        await pending

        assert form.closed is True
        assert form.state == Submitting()
        with pytest.raises(FormClosedError):
            await form.submit()

    async def test_context_manager_closes(self) -> None:
        async with AnalyzerForm(endpoint=ENDPOINT) as form:
            assert form.closed is False
        assert form.closed is True

    async def test_cancelling_submit_returns_to_idle(
        self, form: AnalyzerForm, monkeypatch
    ) -> None:
        async def _never(url, **kwargs):
            await asyncio.Event().wait()

        monkeypatch.setattr("webanalyzer.form.analyze_url", _never)

        form.set_url("https://example.com")
        pending = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        assert form.state == Idle()
        assert form.is_busy is False
