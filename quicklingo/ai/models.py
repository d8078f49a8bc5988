"""
Translation Data Classes

Contains the request descriptor, the stream events produced by the chunk
parser, and the terminal outcome of one translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from quicklingo.ai.exceptions import ErrorKind


@dataclass(frozen=True)
class TranslationRequest:
    """Outbound request for one translation. Built fresh per invocation."""
    text: str
    streaming: bool
    model: str
    endpoint: str
    credential: str = field(repr=False)
    target_language: str = "zh-CN"
    instruction: str = ""

    @property
    def prompt(self) -> str:
        return f"{self.instruction}\n{self.text}"

    def headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.credential}",
            "Content-Type": "application/json",
        }

    def payload(self) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [{"role": "user", "content": self.prompt}]
        return {
            "model": self.model,
            "stream": self.streaming,
            "messages": messages,
        }


# Stream events, in arrival order

@dataclass(frozen=True)
class Delta:
    text: str


@dataclass(frozen=True)
class Done:
    pass


@dataclass(frozen=True)
class ParseWarning:
    raw: str
    reason: str = ""


StreamEvent = Union[Delta, Done, ParseWarning]


@dataclass(frozen=True)
class PartialText:
    """Cumulative translation so far, never an isolated fragment."""
    text: str


# Terminal outcomes

@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class TimedOut:
    pass


@dataclass(frozen=True)
class Failed:
    kind: ErrorKind
    message: str


TranslationOutcome = Union[Success, Cancelled, TimedOut, Failed]

TERMINAL_TYPES = (Success, Cancelled, TimedOut, Failed)


def is_terminal(item: object) -> bool:
    """True when *item* is a TranslationOutcome."""
    return isinstance(item, TERMINAL_TYPES)
