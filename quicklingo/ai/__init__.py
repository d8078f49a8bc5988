"""
AI Module

This module provides the translation core: request building, stream
parsing, cancellation and stream orchestration.
"""

from quicklingo.ai.exceptions import (
    ConfigError,
    ErrorKind,
    InputError,
    NetworkError,
    TranslationError,
)
from quicklingo.ai.models import (
    Cancelled,
    Delta,
    Done,
    Failed,
    ParseWarning,
    PartialText,
    Success,
    TimedOut,
    TranslationRequest,
)
from quicklingo.ai.request import build_request
from quicklingo.ai.parser import ChunkParser
from quicklingo.ai.cancellation import CancelCause, CancellationHandle
from quicklingo.ai.streaming import StreamOrchestrator

__all__ = [
    'TranslationError', 'InputError', 'ConfigError', 'NetworkError', 'ErrorKind',
    'TranslationRequest', 'Delta', 'Done', 'ParseWarning', 'PartialText',
    'Success', 'Cancelled', 'TimedOut', 'Failed',
    'build_request', 'ChunkParser', 'CancelCause', 'CancellationHandle',
    'StreamOrchestrator',
]
