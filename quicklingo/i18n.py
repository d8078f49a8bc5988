"""
Internationalization (i18n) module for QuickLingo.

Provides the user-facing messages shown in the result panel and in API
responses. Language packs are JSON files under web/locales/.

Note: Log messages are NOT translated - they remain in English for debugging purposes.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from quicklingo.logger import get_logger

logger = get_logger(__name__)

# Language pack directory
LOCALES_DIR = Path(__file__).parent / "web" / "locales"

DEFAULT_LANGUAGE = "en"

# Supported interface languages with their display names
SUPPORTED_LANGUAGES = {
    "en": {"name": "English", "native_name": "English"},
    "zh-CN": {"name": "Chinese (Simplified)", "native_name": "简体中文"},
}

# Cache for loaded language packs
_language_cache: Dict[str, Dict[str, Any]] = {}


def load_language(lang_code: str) -> Dict[str, Any]:
    """
    Load a language pack from JSON file, falling back to English.

    Args:
        lang_code: The language code (e.g., 'en', 'zh-CN')

    Returns:
        Dictionary containing all messages for the language
    """
    lang_code = normalize_language_code(lang_code)
    if lang_code in _language_cache:
        return _language_cache[lang_code]

    lang_file = LOCALES_DIR / f"{lang_code}.json"
    try:
        with open(lang_file, 'r', encoding='utf-8') as f:
            translations = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load language file {lang_file}: {e}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}

    _language_cache[lang_code] = translations
    logger.debug(f"Loaded language pack: {lang_code}")
    return translations


def normalize_language_code(lang_code: str) -> str:
    """
    Normalize a language code to one of the supported languages.

    'zh', 'zh-cn' and 'zh_CN' all become 'zh-CN'; anything unknown becomes 'en'.
    """
    if not lang_code:
        return DEFAULT_LANGUAGE

    lang_lower = lang_code.lower().replace('_', '-')
    for supported in SUPPORTED_LANGUAGES:
        if lang_lower == supported.lower():
            return supported

    lang_prefix = lang_lower.split('-')[0]
    for supported in SUPPORTED_LANGUAGES:
        if supported.lower().startswith(lang_prefix):
            return supported

    return DEFAULT_LANGUAGE


def get_nested_value(data: Dict[str, Any], key_path: str) -> Optional[str]:
    """Get a string from a nested dictionary using dot notation ('panel.loading')."""
    current = data
    for key in key_path.split('.'):
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None
    return current if isinstance(current, str) else None


def get_translation(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get the message for *key* in *lang*.

    Falls back to English, then to the key itself. kwargs are interpolated
    with str.format.
    """
    lang = normalize_language_code(lang)
    value = get_nested_value(load_language(lang), key)

    if value is None and lang != DEFAULT_LANGUAGE:
        value = get_nested_value(load_language(DEFAULT_LANGUAGE), key)

    if value is None:
        logger.debug(f"Translation not found for key: {key} (lang: {lang})")
        return key

    if kwargs:
        try:
            value = value.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Missing interpolation key {e} for translation: {key}")

    return value


# Alias for convenience
t = get_translation


def get_available_languages() -> List[Dict[str, str]]:
    """List the interface languages with their display names."""
    return [
        {"code": code, "name": info["name"], "native_name": info["native_name"]}
        for code, info in SUPPORTED_LANGUAGES.items()
    ]


def clear_cache() -> None:
    """Clear the language cache (useful for development/testing)."""
    _language_cache.clear()
    logger.debug("Language cache cleared")
