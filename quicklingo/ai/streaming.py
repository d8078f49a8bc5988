"""
Stream orchestration for one translation request.

StreamOrchestrator.execute() owns the HTTP call, drives ChunkParser over the
streamed body and yields, in order:

- zero or more PartialText items, each carrying the cumulative translation;
- exactly one TranslationOutcome, after which nothing else is yielded.

The response is closed on every path, so data arriving after the outcome
is discarded.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, AsyncIterator, Iterable, Iterator, List, Optional, Union

import httpx

from quicklingo.logger import get_logger
from quicklingo.ai.cancellation import CancelCause, CancellationHandle
from quicklingo.ai.exceptions import ErrorKind, NetworkError
from quicklingo.ai.models import (
    Cancelled,
    Delta,
    Failed,
    ParseWarning,
    PartialText,
    StreamEvent,
    Success,
    TimedOut,
    TranslationOutcome,
    TranslationRequest,
)
from quicklingo.ai.parser import ChunkParser

logger = get_logger(__name__)

StreamItem = Union[PartialText, TranslationOutcome]


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', 60.0),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 60.0
    return httpx.Timeout(
        connect=10.0,
        write=60.0,
        read=timeout_value,
        pool=10.0,
    )


def describe_http_error(response: httpx.Response) -> str:
    """Build a readable message from an error response body."""
    error_text = "Unknown error"
    try:
        error_json = response.json()
        if isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
        else:
            error_text = response.text[:500]
    except ValueError:
        error_text = response.text[:500] or "No details"
    return f"API error ({response.status_code}): {error_text}"


def extract_message_content(result: Any) -> str:
    """Return choices[0].message.content from a buffered response, or ""."""
    try:
        content = result['choices'][0]['message'].get('content')
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""
    return content if isinstance(content, str) else ""


class _Transcript:
    """Running concatenation of every delta seen so far."""

    def __init__(self):
        self._parts: List[str] = []
        self.text = ""

    def apply(self, events: Iterable[StreamEvent]) -> Iterator[PartialText]:
        for event in events:
            if isinstance(event, Delta):
                self._parts.append(event.text)
                self.text = "".join(self._parts)
                yield PartialText(self.text)
            elif isinstance(event, ParseWarning):
                # Best effort: one bad line never aborts the stream
                logger.debug(f"Skipping malformed stream line: {event.raw[:200]!r} ({event.reason})")


class StreamOrchestrator:
    """Runs one TranslationRequest and reports its progress and outcome."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Any = None,
    ):
        self._transport = transport
        self._timeout = timeout

    def _client(self, handle: CancellationHandle) -> httpx.AsyncClient:
        timeout = self._timeout if self._timeout is not None else handle.timeout
        return httpx.AsyncClient(timeout=get_httpx_timeout(timeout), transport=self._transport)

    async def execute(
        self,
        request: TranslationRequest,
        handle: CancellationHandle,
    ) -> AsyncIterator[StreamItem]:
        """Issue *request* and yield PartialText items, then one outcome.

        *handle* is bound to the current task here; its deadline starts now.
        """
        handle.bind()
        start_time = time.time()
        transcript = _Transcript()
        outcome: Optional[TranslationOutcome] = None

        logger.info(
            f"Translation request: model={request.model}, streaming={request.streaming}, "
            f"chars={len(request.text)}"
        )

        try:
            if handle.cancelled:
                # Fired before we started: no request at all
                outcome = self._cancellation_outcome(handle)
            else:
                async with self._client(handle) as client:
                    if not request.streaming:
                        # Buffered mode reports no partial, only the final text
                        outcome = Success(await self._fetch_buffered(client, request))
                    else:
                        partials = self._fetch_streamed(client, request, transcript)
                        try:
                            async for partial in partials:
                                yield partial
                        finally:
                            await partials.aclose()
                        outcome = Success(transcript.text)
        except asyncio.CancelledError:
            if handle.cause is None:
                # Not ours: someone else is tearing the task down
                raise
            outcome = self._cancellation_outcome(handle)
        except NetworkError as e:
            outcome = Failed(ErrorKind.NETWORK, str(e))
        except httpx.TimeoutException as e:
            outcome = Failed(ErrorKind.NETWORK, f"API request timeout: {type(e).__name__}")
        except httpx.HTTPError as e:
            outcome = Failed(ErrorKind.NETWORK, f"API call failed: {type(e).__name__}: {e}")
        finally:
            handle.close()

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Translation finished: outcome={type(outcome).__name__}, latency={latency_ms}ms")
        yield outcome

    @staticmethod
    def _cancellation_outcome(handle: CancellationHandle) -> TranslationOutcome:
        # One abort, one outcome: the deadline wins a tie (see CancellationHandle.cause)
        if handle.cause is CancelCause.TIMEOUT:
            logger.info(f"Translation timed out after {handle.timeout}s")
            return TimedOut()
        logger.info("Translation cancelled by user")
        return Cancelled()

    async def _fetch_buffered(self, client: httpx.AsyncClient, request: TranslationRequest) -> str:
        response = await client.post(request.endpoint, headers=request.headers(), json=request.payload())
        if response.is_error:
            raise NetworkError(describe_http_error(response), details={"status_code": response.status_code})

        try:
            result = response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON in API response: {e}")

        content = extract_message_content(result)
        logger.debug(f"Received {len(content)} chars (buffered)")
        return content

    async def _fetch_streamed(
        self,
        client: httpx.AsyncClient,
        request: TranslationRequest,
        transcript: _Transcript,
    ) -> AsyncIterator[PartialText]:
        parser = ChunkParser()
        async with client.stream(
            "POST", request.endpoint, headers=request.headers(), json=request.payload()
        ) as response:
            if response.is_error:
                await response.aread()
                raise NetworkError(describe_http_error(response), details={"status_code": response.status_code})

            async for chunk in response.aiter_bytes():
                for partial in transcript.apply(parser.feed(chunk)):
                    yield partial
                if parser.done:
                    break

            for partial in transcript.apply(parser.finish()):
                yield partial

        logger.debug(f"Stream complete: {len(transcript.text)} chars, sentinel_seen={parser.done}")
