import copy
import json
from typing import Dict, Any

from quicklingo.core import database as db
from quicklingo.core.schema import initialize_database
from quicklingo.ai.exceptions import ConfigError
from quicklingo.ai.request import API_KEY_PLACEHOLDER
from quicklingo.language_codes import DEFAULT_TARGET_LANGUAGE
from quicklingo.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60  # Wall-clock deadline for one translation

EXTENSION_DISPLAY_NAME = "QuickLingo"

# Default configuration template
DEFAULT_CONFIG = {
    "api_key": API_KEY_PLACEHOLDER,
    "api_url": "https://api.openai.com/v1/chat/completions",
    "model_name": "gpt-4o",
    "enable_streaming": True,
    "target_language": DEFAULT_TARGET_LANGUAGE,
    "timeout": DEFAULT_TIMEOUT_SECONDS,
    "ui_language": "en",
    "log_mode": "off",
}


def initialize_app():
    """
    Initialize the application.
    Creates the database and stores the default configuration on first run.
    """
    logger.info("Initializing application...")

    initialize_database()
    logger.info("Database initialized")

    try:
        if not db.get_app_config('config'):
            logger.info("No config in database, initializing default config")
            save_config(DEFAULT_CONFIG)
        else:
            logger.debug("Config already exists in database")
    except Exception as e:
        logger.error(f"Failed to check/initialize config in database: {e}")
        logger.warning("Application will use in-memory default configuration")

    logger.info("Application initialization complete")


def load_config() -> Dict[str, Any]:
    """Load the configuration from database, with defaults for missing keys."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    try:
        config_json = db.get_app_config('config')
    except Exception as e:
        logger.error(f"Failed to load config from database: {e}")
        logger.warning("Using default configuration")
        return config

    if not config_json:
        logger.debug("No config in database, using defaults")
        return config

    try:
        stored = json.loads(config_json)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config from database: {e}")
        logger.warning("Using default configuration")
        return config

    if isinstance(stored, dict):
        config.update(stored)
    logger.debug("Configuration loaded from database")
    return config


def save_config(config: Dict[str, Any]):
    """Save the configuration to database."""
    try:
        config_json = json.dumps(config, ensure_ascii=False)
        db.set_app_config('config', config_json)
        logger.info("Configuration saved to database")
    except Exception as e:
        logger.error(f"Failed to save config to database: {e}")
        raise


def is_api_key_configured(api_key: str) -> bool:
    return bool(api_key and api_key.strip() and api_key != API_KEY_PLACEHOLDER)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate that the API key and URL are set.

    Raises:
        ConfigError: With details.missing_field naming what is absent.
    """
    if not is_api_key_configured(config.get('api_key', '')):
        raise ConfigError(
            "API key not configured. Please set it in Settings.",
            details={"missing_field": "api_key"}
        )
    if not (config.get('api_url') or '').strip():
        raise ConfigError(
            "API URL not configured. Please set it in Settings.",
            details={"missing_field": "api_url"}
        )


def get_timeout(config: Dict[str, Any]) -> float:
    """Deadline in seconds from config, falling back to the default for bad values."""
    try:
        timeout = float(config.get('timeout', DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError):
        logger.warning(f"Invalid timeout in config: {config.get('timeout')!r}")
        return float(DEFAULT_TIMEOUT_SECONDS)
    return timeout if timeout > 0 else float(DEFAULT_TIMEOUT_SECONDS)
