"""
Request building for the chat-completion endpoint.

Pure functions: turn the text to translate plus configuration into a
TranslationRequest. No network access happens here.
"""

from typing import Any, Dict
from urllib.parse import urlparse

from quicklingo import language_codes as lc
from quicklingo.ai.exceptions import ConfigError, InputError
from quicklingo.ai.models import TranslationRequest

# Instruction placed on the line before the text to translate
INSTRUCTION_TEMPLATE = "Translate the following content into {target_language_name}:"

API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"


def build_instruction(target_language: str) -> str:
    """Render the fixed instruction for *target_language* (a language code)."""
    target_language_name = lc.get_language_name(target_language) or target_language
    return INSTRUCTION_TEMPLATE.format(target_language_name=target_language_name)


def _is_well_formed_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def build_request(text: str, config: Dict[str, Any]) -> TranslationRequest:
    """
    Build the outbound request for one translation.

    Args:
        text: Text to translate. Interpolated verbatim after trimming.
        config: Configuration with api_key, api_url, model_name,
            enable_streaming and target_language.

    Returns:
        Immutable TranslationRequest.

    Raises:
        InputError: If text is empty or whitespace-only.
        ConfigError: If the API key or URL is missing, or the URL is malformed.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        raise InputError("nothing to translate")

    api_key = (config.get("api_key") or "").strip()
    if not api_key or api_key == API_KEY_PLACEHOLDER:
        raise ConfigError(
            "API key not configured",
            details={"missing_field": "api_key"},
        )

    api_url = (config.get("api_url") or "").strip()
    if not api_url:
        raise ConfigError(
            "API URL not configured",
            details={"missing_field": "api_url"},
        )
    if not _is_well_formed_url(api_url):
        raise ConfigError(
            f"API URL is not a valid http(s) URL: {api_url}",
            details={"invalid_field": "api_url"},
        )

    target_language = config.get("target_language") or lc.DEFAULT_TARGET_LANGUAGE

    return TranslationRequest(
        text=trimmed,
        streaming=bool(config.get("enable_streaming", True)),
        model=config.get("model_name") or "gpt-4o",
        endpoint=api_url,
        credential=api_key,
        target_language=target_language,
        instruction=build_instruction(target_language),
    )
