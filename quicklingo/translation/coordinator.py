"""
Translation Coordinator

Top-level entry point for one translation:
- validates the selection and the configuration
- builds the request and wires the cancellation handle
- relays progress to the panel and maps the outcome to one terminal message

translate() never raises for translation problems; every path ends in a
TranslationOutcome and exactly one terminal message on the sink.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from quicklingo.config import load_config, validate_config, get_timeout
from quicklingo.logger import get_logger
from quicklingo import i18n
from quicklingo.ai.cancellation import CancelCause, CancellationHandle
from quicklingo.ai.exceptions import ErrorKind, TranslationError
from quicklingo.ai.models import (
    Cancelled,
    Failed,
    PartialText,
    Success,
    TimedOut,
    TranslationOutcome,
)
from quicklingo.ai.request import build_request
from quicklingo.ai.streaming import StreamOrchestrator
from quicklingo.translation.panel import PanelMessage, Sink

logger = get_logger(__name__)

_FAILURE_MESSAGE_KEYS = {
    ErrorKind.INPUT: "panel.nothing_to_translate",
    ErrorKind.CONFIG: "panel.invalid_config",
    ErrorKind.NETWORK: "panel.failed",
}


class _SinkGuard:
    """Forwards to the sink until the terminal message, then drops everything."""

    def __init__(self, sink: Sink):
        self._sink = sink
        self.terminated = False

    def post(self, message: PanelMessage) -> None:
        if self.terminated:
            logger.debug("Dropping panel update posted after the terminal message")
            return
        if message.is_terminal:
            self.terminated = True
        self._sink.post(message)


class TranslationCoordinator:
    """Runs translations against a sink, one at a time per sink."""

    def __init__(
        self,
        orchestrator: Optional[StreamOrchestrator] = None,
        config_provider: Callable[[], Dict[str, Any]] = load_config,
    ):
        self.orchestrator = orchestrator or StreamOrchestrator()
        self._config_provider = config_provider

    async def translate(
        self,
        raw_selection: str,
        sink: Sink,
        config: Optional[Dict[str, Any]] = None,
        handle: Optional[CancellationHandle] = None,
    ) -> TranslationOutcome:
        """
        Translate *raw_selection*, posting progress and the result to *sink*.

        Args:
            raw_selection: Text to translate.
            sink: Receives partial messages and one terminal message.
            config: Configuration; loaded from the config provider when None.
            handle: Cancellation handle shared with the caller's cancel
                trigger. Created with the configured deadline when None.

        Returns:
            The outcome: Success, Cancelled, TimedOut or Failed.
        """
        if config is None:
            config = self._config_provider()
        lang = config.get('ui_language', i18n.DEFAULT_LANGUAGE)
        if handle is None:
            handle = CancellationHandle(get_timeout(config))
        guard = _SinkGuard(sink)

        try:
            outcome = await self._run(raw_selection, guard, config, lang, handle)
        except asyncio.CancelledError:
            if handle.cause is None:
                raise
            outcome = TimedOut() if handle.cause is CancelCause.TIMEOUT else Cancelled()
        except Exception as e:
            logger.exception(f"Unexpected error during translation: {type(e).__name__}: {e}")
            outcome = Failed(ErrorKind.NETWORK, f"{type(e).__name__}: {e}")
        finally:
            handle.close()

        self._post_outcome(outcome, guard, lang)
        return outcome

    async def _run(
        self,
        raw_selection: str,
        guard: _SinkGuard,
        config: Dict[str, Any],
        lang: str,
        handle: CancellationHandle,
    ) -> TranslationOutcome:
        if not raw_selection or not raw_selection.strip():
            return Failed(ErrorKind.INPUT, "nothing to translate")

        try:
            validate_config(config)
            request = build_request(raw_selection, config)
        except TranslationError as e:
            return Failed(e.kind, str(e))

        guard.post(PanelMessage(i18n.get_translation("panel.loading", lang), is_loading=True))

        outcome: Optional[TranslationOutcome] = None
        stream = self.orchestrator.execute(request, handle)
        try:
            async for item in stream:
                if isinstance(item, PartialText):
                    guard.post(PanelMessage(item.text))
                else:
                    outcome = item
        finally:
            # Releases the HTTP response when the loop is left early
            await stream.aclose()
        return outcome

    def _post_outcome(self, outcome: TranslationOutcome, guard: _SinkGuard, lang: str) -> None:
        if isinstance(outcome, Success):
            logger.info(f"Translation completed: {len(outcome.text)} chars")
            guard.post(PanelMessage(outcome.text, is_complete=True))
        elif isinstance(outcome, TimedOut):
            guard.post(PanelMessage(i18n.get_translation("panel.timed_out", lang), is_error=True))
        elif isinstance(outcome, Cancelled):
            guard.post(PanelMessage(i18n.get_translation("panel.cancelled", lang), is_error=True))
        else:
            if outcome.kind is ErrorKind.NETWORK:
                logger.error(f"Translation failed: {outcome.message}")
            else:
                logger.warning(f"Translation rejected ({outcome.kind.value}): {outcome.message}")
            key = _FAILURE_MESSAGE_KEYS[outcome.kind]
            guard.post(PanelMessage(i18n.get_translation(key, lang), is_error=True))
