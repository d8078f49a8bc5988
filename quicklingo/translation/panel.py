"""
Result panel: the sink that receives translation updates.

A translation posts zero or more partial messages followed by exactly one
terminal message. The panel is written by the worker running the
translation and read by HTTP request threads, hence the lock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class PanelMessage:
    """One update shown in the panel."""
    text: str
    is_complete: bool = False
    is_error: bool = False
    is_loading: bool = False
    posted_at: float = field(default_factory=time.time, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.is_complete or self.is_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "isComplete": self.is_complete,
            "isError": self.is_error,
            "isLoading": self.is_loading,
        }


class Sink(Protocol):
    def post(self, message: PanelMessage) -> None:
        ...


class ResultPanel:
    """In-memory sink keeping every message posted to it."""

    def __init__(self, title: str = "Translation Result"):
        self.title = title
        self.created_at = time.time()
        self._lock = threading.Lock()
        self._messages: List[PanelMessage] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def latest(self) -> Optional[PanelMessage]:
        with self._lock:
            return self._messages[-1] if self._messages else None

    @property
    def messages(self) -> List[PanelMessage]:
        with self._lock:
            return list(self._messages)

    def post(self, message: PanelMessage) -> None:
        with self._lock:
            if self._disposed:
                return
            self._messages.append(message)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self._messages.clear()

    def to_dict(self, include_history: bool = False) -> Dict[str, Any]:
        latest = self.latest
        payload: Dict[str, Any] = {
            "title": self.title,
            "message": latest.to_dict() if latest else None,
        }
        if include_history:
            payload["history"] = [m.to_dict() for m in self.messages]
        return payload


class PanelOwner:
    """
    Owns at most one ResultPanel.

    reveal() reuses the open panel or creates a new one; dispose() closes it
    and forgets it, so the next reveal() starts fresh. Whoever holds the
    owner is the only one allowed to hand the panel to a translation.
    """

    def __init__(self, title: str = "Translation Result"):
        self.title = title
        self._lock = threading.Lock()
        self._panel: Optional[ResultPanel] = None

    @property
    def panel(self) -> Optional[ResultPanel]:
        return self._panel

    def reveal(self) -> ResultPanel:
        with self._lock:
            if self._panel is None or self._panel.disposed:
                self._panel = ResultPanel(self.title)
            return self._panel

    def dispose(self) -> bool:
        """Dispose the open panel. Returns False when there was none."""
        with self._lock:
            panel, self._panel = self._panel, None
        if panel is None:
            return False
        panel.dispose()
        return True
