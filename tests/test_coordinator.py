"""Tests for the translation coordinator (quicklingo/translation/coordinator.py)."""

from __future__ import annotations

import asyncio
import sys

import httpx
import pytest

from quicklingo.ai.cancellation import CancellationHandle
from quicklingo.ai.exceptions import ErrorKind
from quicklingo.ai.models import Cancelled, Failed, Success, TimedOut
from quicklingo.ai.streaming import StreamOrchestrator
from quicklingo.translation.coordinator import TranslationCoordinator
from quicklingo.translation.panel import PanelMessage, ResultPanel

from tests.helpers import DONE_LINE, FakeEndpoint, completion_body, delta_line, make_config


def make_coordinator(endpoint: FakeEndpoint) -> TranslationCoordinator:
    return TranslationCoordinator(
        orchestrator=StreamOrchestrator(transport=endpoint.transport()),
        config_provider=make_config,
    )


def terminal_messages(panel: ResultPanel):
    return [m for m in panel.messages if m.is_terminal]


def partial_messages(panel: ResultPanel):
    return [m for m in panel.messages if not m.is_terminal and not m.is_loading]


class TestSuccess:
    @pytest.mark.asyncio
    async def test_streaming_example(self):
        endpoint = FakeEndpoint([delta_line("你"), delta_line("好"), DONE_LINE])
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate("hello", panel)

        assert outcome == Success("你好")
        messages = panel.messages
        assert messages[0].is_loading is True
        assert [m.text for m in partial_messages(panel)] == ["你", "你好"]
        assert messages[-1].text == "你好"
        assert messages[-1].is_complete is True
        assert messages[-1].is_error is False

    @pytest.mark.asyncio
    async def test_partials_are_cumulative(self):
        fragments = ["Lorem", " ipsum", " dolor", " sit", " amet"]
        endpoint = FakeEndpoint([delta_line(f) for f in fragments] + [DONE_LINE])
        panel = ResultPanel()

        await make_coordinator(endpoint).translate("hello", panel)

        texts = [m.text for m in partial_messages(panel)]
        for i, text in enumerate(texts):
            assert text == "".join(fragments[:i + 1])

    @pytest.mark.asyncio
    async def test_non_streaming_example(self):
        endpoint = FakeEndpoint(json_body=completion_body("你好"))
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate(
            "hello", panel, config=make_config(enable_streaming=False)
        )

        assert outcome == Success("你好")
        assert partial_messages(panel) == []
        assert panel.latest.text == "你好"
        assert panel.latest.is_complete is True

    @pytest.mark.asyncio
    async def test_config_comes_from_provider_when_not_given(self):
        endpoint = FakeEndpoint([DONE_LINE])
        coordinator = TranslationCoordinator(
            orchestrator=StreamOrchestrator(transport=endpoint.transport()),
            config_provider=lambda: make_config(model_name="my-model"),
        )

        await coordinator.translate("hello", ResultPanel())

        assert endpoint.last_payload["model"] == "my-model"


class TestRejected:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("selection", ["", "   ", "\n\t"])
    async def test_empty_input_makes_no_network_call(self, selection):
        endpoint = FakeEndpoint([DONE_LINE])
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate(selection, panel)

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.INPUT
        assert endpoint.called is False
        assert len(panel.messages) == 1
        assert panel.latest.is_error is True
        assert panel.latest.text == "Nothing to translate."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"api_key": ""},
        {"api_key": "YOUR_API_KEY_HERE"},
        {"api_url": ""},
    ])
    async def test_invalid_config(self, overrides):
        endpoint = FakeEndpoint([DONE_LINE])
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate("hello", panel, config=make_config(**overrides))

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.CONFIG
        assert endpoint.called is False
        assert panel.latest.is_error is True
        assert "API key and URL" in panel.latest.text


class TestFailuresAndCancellation:
    @pytest.mark.asyncio
    async def test_network_failure_does_not_raise(self):
        endpoint = FakeEndpoint(error=httpx.ConnectError("connection refused"))
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate("hello", panel)

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.NETWORK
        assert panel.latest.text == "Translation failed, please try again later."
        assert "connection refused" not in panel.latest.text

    @pytest.mark.asyncio
    async def test_deadline(self):
        endpoint = FakeEndpoint([delta_line("a"), 5.0])
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate(
            "hello", panel, handle=CancellationHandle(timeout=0.1)
        )

        assert outcome == TimedOut()
        assert panel.latest.text == "Translation timed out."
        assert panel.latest.is_error is True

    @pytest.mark.asyncio
    async def test_deadline_from_config(self):
        endpoint = FakeEndpoint([5.0])
        outcome = await make_coordinator(endpoint).translate(
            "hello", ResultPanel(), config=make_config(timeout=0.1)
        )
        assert outcome == TimedOut()

    @pytest.mark.asyncio
    async def test_user_cancel(self):
        handle = CancellationHandle(timeout=5.0)
        endpoint = FakeEndpoint([delta_line("a"), handle.cancel, delta_line("b")])
        panel = ResultPanel()

        outcome = await make_coordinator(endpoint).translate("hello", panel, handle=handle)

        assert outcome == Cancelled()
        assert [m.text for m in partial_messages(panel)] == ["a"]
        assert panel.latest.text == "Translation cancelled."

    @pytest.mark.asyncio
    async def test_both_sources_fired_reports_timeout(self):
        handle = CancellationHandle(timeout=5.0)

        def both():
            handle.expire()
            handle.cancel()

        endpoint = FakeEndpoint([delta_line("a"), both])
        outcome = await make_coordinator(endpoint).translate("hello", ResultPanel(), handle=handle)

        assert outcome == TimedOut()

    @pytest.mark.asyncio
    async def test_messages_follow_ui_language(self):
        endpoint = FakeEndpoint([5.0])
        panel = ResultPanel()

        await make_coordinator(endpoint).translate(
            "hello", panel, config=make_config(ui_language="zh-CN", timeout=0.1)
        )

        assert panel.latest.text == "翻译已超时"

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.version_info < (3, 11), reason="Task.cancelling() needs Python 3.11")
    async def test_task_is_usable_after_cancel(self):
        handle = CancellationHandle(timeout=5.0)
        endpoint = FakeEndpoint([delta_line("a"), handle.cancel])

        outcome = await make_coordinator(endpoint).translate("hello", ResultPanel(), handle=handle)

        assert outcome == Cancelled()
        assert asyncio.current_task().cancelling() == 0
        await asyncio.sleep(0)


class _RecordingOrchestrator(StreamOrchestrator):
    """Notes whether the stream it hands out was closed."""

    def __init__(self, transport):
        super().__init__(transport=transport)
        self.stream_closed = False

    async def execute(self, request, handle):
        inner = super().execute(request, handle)
        try:
            async for item in inner:
                yield item
        finally:
            await inner.aclose()
            self.stream_closed = True


class _BrokenSink(ResultPanel):
    """Fails on the first partial update."""

    def __init__(self):
        super().__init__()
        self.raised = False

    def post(self, message: PanelMessage) -> None:
        if not self.raised and not message.is_loading and not message.is_terminal:
            self.raised = True
            raise RuntimeError("panel went away")
        super().post(message)


class TestSinkErrors:
    @pytest.mark.asyncio
    async def test_stream_closed_when_sink_raises(self):
        endpoint = FakeEndpoint([delta_line("a"), 5.0, delta_line("b"), DONE_LINE])
        orchestrator = _RecordingOrchestrator(endpoint.transport())
        coordinator = TranslationCoordinator(orchestrator=orchestrator, config_provider=make_config)
        panel = _BrokenSink()

        outcome = await coordinator.translate("hello", panel)

        assert isinstance(outcome, Failed)
        assert outcome.kind is ErrorKind.NETWORK
        assert orchestrator.stream_closed is True
        assert endpoint.chunks_sent == 1
        assert panel.latest.is_error is True


class TestSingleTerminal:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("selection,endpoint_kwargs,config", [
        ("hello", {"steps": [delta_line("a"), DONE_LINE]}, {}),
        ("hello", {"json_body": completion_body("a")}, {"enable_streaming": False}),
        ("hello", {"steps": [delta_line("a"), 5.0]}, {"timeout": 0.1}),
        ("hello", {"status_code": 503, "json_body": {"error": "overloaded"}}, {}),
        ("   ", {"steps": [DONE_LINE]}, {}),
        ("hello", {"steps": [DONE_LINE]}, {"api_key": ""}),
    ])
    async def test_exactly_one_terminal_and_it_is_last(self, selection, endpoint_kwargs, config):
        panel = ResultPanel()
        await make_coordinator(FakeEndpoint(**endpoint_kwargs)).translate(
            selection, panel, config=make_config(**config)
        )

        terminals = terminal_messages(panel)
        assert len(terminals) == 1
        assert panel.messages[-1] is terminals[0]
