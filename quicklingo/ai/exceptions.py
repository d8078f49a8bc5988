"""
AI Service Exceptions

This module contains exception classes for the translation core.
Separated to avoid circular imports between request.py, streaming.py and config.py.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure taxonomy carried by a Failed outcome."""

    INPUT = "input_error"
    CONFIG = "config_error"
    NETWORK = "network_error"


class TranslationError(Exception):
    """Translation service error with optional code and details."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code or self.kind.value
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code, "details": self.details}


class InputError(TranslationError):
    """The text to translate is empty or whitespace-only."""

    kind = ErrorKind.INPUT


class ConfigError(TranslationError):
    """API key or API URL is missing or malformed."""

    kind = ErrorKind.CONFIG


class NetworkError(TranslationError):
    """The remote call failed, or its response could not be understood."""

    kind = ErrorKind.NETWORK
