"""Settings management API routes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request, g

import quicklingo.config as config
from quicklingo.logger import get_logger, refresh_log_mode, LOG_MODES
from quicklingo import i18n
from quicklingo import language_codes as lc
from quicklingo.ai.request import build_request

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

_STRING_FIELDS = ("api_key", "api_url", "model_name")


def mask_api_key(api_key: str) -> str:
    """Show only the last four characters of a configured key."""
    if not config.is_api_key_configured(api_key):
        return ""
    return "****" + api_key[-4:] if len(api_key) > 8 else "****"


def _validate_settings(new_config: Dict[str, Any]) -> Optional[str]:
    """Return the name of the first invalid field, or None."""
    for field in _STRING_FIELDS:
        if field in new_config and not isinstance(new_config[field], str):
            return field
    if "enable_streaming" in new_config and not isinstance(new_config["enable_streaming"], bool):
        return "enable_streaming"
    if "timeout" in new_config:
        timeout = new_config["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            return "timeout"
    if "target_language" in new_config and not lc.is_valid_language_code(new_config["target_language"]):
        return "target_language"
    if "ui_language" in new_config and new_config["ui_language"] not in i18n.SUPPORTED_LANGUAGES:
        return "ui_language"
    if "log_mode" in new_config and new_config["log_mode"] not in LOG_MODES:
        return "log_mode"
    return None


@settings_bp.get("/")
def get_settings():
    """Return current configuration (API key masked) and option lists."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    try:
        current_config = config.load_config()
        current_config["api_key"] = mask_api_key(current_config.get("api_key", ""))
        logger.debug("Settings retrieved")
        return jsonify({
            "config": current_config,
            "meta": {
                "target_languages": lc.get_all_language_codes(),
                "ui_languages": i18n.get_available_languages(),
                "log_modes": list(LOG_MODES),
                "defaults": {k: v for k, v in config.DEFAULT_CONFIG.items() if k != "api_key"},
            }
        })
    except Exception as e:
        logger.error(f"Failed to retrieve settings: {e}")
        return jsonify({"error": i18n.get_translation("api.errors.failed_to_retrieve_settings", lang=lang)}), 500


@settings_bp.put("/")
def update_settings():
    """Update configuration. Unknown keys are ignored, missing keys keep their value."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = request.get_json(silent=True)
    if not data or not isinstance(data.get("config"), dict):
        return jsonify({"error": i18n.get_translation("api.errors.config_missing", lang=lang)}), 400

    new_config = {k: v for k, v in data["config"].items() if k in config.DEFAULT_CONFIG}

    # A masked or blank key from the settings form means "leave unchanged"
    api_key = new_config.get("api_key")
    if isinstance(api_key, str) and (not api_key.strip() or api_key.startswith("****")):
        new_config.pop("api_key")

    invalid_field = _validate_settings(new_config)
    if invalid_field:
        return jsonify({
            "error": i18n.get_translation("api.errors.invalid_setting", lang=lang, field=invalid_field),
            "field": invalid_field,
        }), 400

    try:
        current_config = config.load_config()
        current_config.update(new_config)
        config.save_config(current_config)
    except Exception as e:
        logger.error(f"Failed to save settings: {e}")
        return jsonify({"error": i18n.get_translation("api.errors.failed_to_save_settings", lang=lang)}), 500

    if "log_mode" in new_config:
        refresh_log_mode()

    logger.info(f"Settings updated: {sorted(new_config.keys())}")
    current_config["api_key"] = mask_api_key(current_config.get("api_key", ""))
    return jsonify({"status": "saved", "config": current_config})


@settings_bp.post("/check")
def check_settings():
    """Validate the stored API key and URL without calling the API."""
    current_config = config.load_config()
    config.validate_config(current_config)
    build_request("ping", current_config)
    return jsonify({"status": "ok", "model_name": current_config.get("model_name")})
