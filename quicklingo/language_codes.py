"""
Target language codes and names.

Codes follow ISO 639-1 (2-letter, e.g. 'ja') or BCP 47 language + region
(e.g. 'zh-CN'). The name is what gets written into the translation
instruction, so it should be something a language model understands.
"""

from typing import Optional, Dict

DEFAULT_TARGET_LANGUAGE = 'zh-CN'

TARGET_LANGUAGES = {
    'ar': 'Arabic',
    'de': 'German',
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'hi': 'Hindi',
    'id': 'Indonesian',
    'it': 'Italian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'nl': 'Dutch',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'pt-BR': 'Portuguese (Brazil)',
    'ru': 'Russian',
    'th': 'Thai',
    'tr': 'Turkish',
    'uk': 'Ukrainian',
    'vi': 'Vietnamese',
    'zh': 'Chinese',
    'zh-CN': 'Simplified Chinese',
    'zh-TW': 'Traditional Chinese',
}


def is_valid_language_code(code: str) -> bool:
    """
    Check if a language code is a supported translation target.

    Examples:
        >>> is_valid_language_code('ja')
        True
        >>> is_valid_language_code('zh-CN')
        True
        >>> is_valid_language_code('klingon')
        False
    """
    return code in TARGET_LANGUAGES


def get_language_name(code: str) -> Optional[str]:
    """
    Get the language name from code, trying the base language as fallback.

    Examples:
        >>> get_language_name('zh-CN')
        'Simplified Chinese'
        >>> get_language_name('de-AT')
        'German'
    """
    if not code:
        return None
    if code in TARGET_LANGUAGES:
        return TARGET_LANGUAGES[code]
    return TARGET_LANGUAGES.get(extract_base_language(code))


def extract_base_language(code: str) -> str:
    """
    Extract the base language from a code with a region.

    Examples:
        >>> extract_base_language('zh-CN')
        'zh'
        >>> extract_base_language('pt_BR')
        'pt'
    """
    return code.replace('_', '-').split('-')[0].lower()


def get_all_language_codes() -> Dict[str, str]:
    """Return a copy of the supported target language table."""
    return TARGET_LANGUAGES.copy()
