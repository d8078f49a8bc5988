"""
Incremental parser for server-sent-event style completion streams.

The response body of a streaming chat completion looks like::

    data: {"choices":[{"delta":{"content":"你"}}]}
    data: {"choices":[{"delta":{"content":"好"}}]}
    data: [DONE]

Transport chunks do not respect line boundaries, so the parser keeps the
unterminated tail of each chunk and prepends it to the next one.
"""

import codecs
import json
from typing import List, Optional, Union

from quicklingo.ai.models import Delta, Done, ParseWarning, StreamEvent

EVENT_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def extract_delta_content(record) -> Optional[str]:
    """Return choices[0].delta.content from a decoded stream record, if present."""
    if not isinstance(record, dict):
        return None
    choices = record.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


class ChunkParser:
    """Turn raw transport chunks into Delta / Done / ParseWarning events."""

    def __init__(self):
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._done = False

    @property
    def done(self) -> bool:
        """True once the [DONE] sentinel has been seen."""
        return self._done

    def feed(self, chunk: Union[bytes, str]) -> List[StreamEvent]:
        """Consume one chunk and return the events for every completed line."""
        if self._done:
            return []

        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))
        self._buffer += chunk

        *lines, self._buffer = self._buffer.split("\n")
        return self._process_lines(lines)

    def finish(self) -> List[StreamEvent]:
        """Flush the decoder and the final unterminated line at end of stream."""
        if self._done:
            return []

        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return self._process_lines(tail.split("\n"))

    def _process_lines(self, lines: List[str]) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        for line in lines:
            event = self._parse_line(line)
            if event is None:
                continue
            events.append(event)
            if isinstance(event, Done):
                self._done = True
                self._buffer = ""
                break
        return events

    def _parse_line(self, line: str) -> Optional[StreamEvent]:
        line = line.strip()
        if not line or not line.startswith(EVENT_PREFIX):
            return None

        payload = line[len(EVENT_PREFIX):].strip()
        if not payload:
            return None
        if payload == DONE_SENTINEL:
            return Done()

        try:
            record = json.loads(payload)
        except ValueError as e:
            return ParseWarning(raw=payload, reason=str(e))

        content = extract_delta_content(record)
        if content:
            return Delta(content)
        return None
