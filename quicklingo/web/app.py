"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, g

from quicklingo import __version__, i18n
from quicklingo.ai.exceptions import TranslationError
from quicklingo.config import EXTENSION_DISPLAY_NAME
from quicklingo.logger import get_logger
from quicklingo.web.tasks import TranslationJobRunner

from .routes.translation import translation_bp
from .routes.settings import settings_bp

logger = get_logger(__name__)


def get_current_language() -> str:
    """
    Determine the interface language for this request.
    Priority: query param > cookie > Accept-Language header > default (en)
    """
    lang = request.args.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    lang = request.cookies.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    accept_lang = request.accept_languages.best_match(
        list(i18n.SUPPORTED_LANGUAGES.keys()),
        default=i18n.DEFAULT_LANGUAGE
    )
    if accept_lang:
        return i18n.normalize_language_code(accept_lang)

    return i18n.DEFAULT_LANGUAGE


def build_app(runner: Optional[TranslationJobRunner] = None) -> Flask:
    """Create and configure the Flask application.

    *runner* owns the result panel; one is created when not given.
    """
    app = Flask(__name__)

    # Keep Unicode in JSON responses
    app.json.ensure_ascii = False

    app.extensions["quicklingo.runner"] = runner or TranslationJobRunner()

    @app.before_request
    def before_request():
        g.lang = get_current_language()

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translation_bp, url_prefix="/api")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register default health and index routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.get("/")
    def home():
        return jsonify({"name": EXTENSION_DISPLAY_NAME, "version": __version__})

    @app.errorhandler(TranslationError)
    def translation_error(e):
        logger.warning("Request rejected (%s): %s", e.code, e)
        return jsonify(e.to_dict()), 400

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"error": "not_found"}), 404

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "internal_server_error"}), 500
