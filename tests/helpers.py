"""Builders for fake chat-completion endpoints and test configs."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import httpx

API_URL = "https://api.example.test/v1/chat/completions"


def make_config(**overrides: Any) -> Dict[str, Any]:
    config = {
        "api_key": "sk-test-0123456789",
        "api_url": API_URL,
        "model_name": "gpt-4o",
        "enable_streaming": True,
        "target_language": "zh-CN",
        "timeout": 60,
        "ui_language": "en",
        "log_mode": "off",
    }
    config.update(overrides)
    return config


def delta_line(text: str) -> str:
    payload = {"choices": [{"index": 0, "delta": {"content": text}}]}
    return "data: " + json.dumps(payload, ensure_ascii=False) + "\n"


DONE_LINE = "data: [DONE]\n"


def completion_body(text: Optional[str]) -> Dict[str, Any]:
    message = {"role": "assistant"}
    if text is not None:
        message["content"] = text
    return {"choices": [{"index": 0, "message": message}]}


Step = Union[str, bytes, Callable[[], Any], float]


class FakeEndpoint:
    """
    MockTransport-backed endpoint.

    A streamed body is a list of steps: str/bytes chunks are sent, floats
    sleep that many seconds, callables are invoked (to fire cancel triggers
    mid-stream).
    """

    def __init__(
        self,
        steps: Iterable[Step] = (),
        status_code: int = 200,
        json_body: Any = None,
        raw_body: Optional[bytes] = None,
        error: Optional[Exception] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.status_code = status_code
        self.json_body = json_body
        self.raw_body = raw_body
        self.error = error
        self.requests: List[httpx.Request] = []
        self.chunks_sent = 0

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last_payload(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body)
        if self.raw_body is not None:
            return httpx.Response(self.status_code, content=self.raw_body)
        return httpx.Response(
            self.status_code,
            headers={"content-type": "text/event-stream"},
            content=self._body(),
        )

    async def _body(self):
        for step in self.steps:
            if isinstance(step, float):
                await asyncio.sleep(step)
            elif callable(step):
                step()
                # Let the abort scheduled by the trigger reach the reader
                await asyncio.sleep(1.0)
            else:
                self.chunks_sent += 1
                yield step.encode("utf-8") if isinstance(step, str) else step
