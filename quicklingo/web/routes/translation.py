"""Translation API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request, g

from quicklingo.logger import get_logger
from quicklingo.web.tasks import TranslationJobRunner, serialize_job
from quicklingo import i18n

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)


def get_runner() -> TranslationJobRunner:
    return current_app.extensions["quicklingo.runner"]


@translation_bp.post("/translate")
def start_translation():
    """Translate the given text in the background; progress goes to the panel."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    text = data.get("text")

    if not isinstance(text, str):
        return jsonify({"error": i18n.get_translation("api.errors.text_required", lang=lang)}), 400

    try:
        job = get_runner().start(text)
    except Exception as e:
        logger.exception("Failed to create translation job: %s", e)
        return jsonify({"error": f"Failed to create translation job: {str(e)}"}), 500

    return jsonify({"job_id": job.job_id, "job": job.to_dict()}), 202


@translation_bp.post("/translate/cancel")
def cancel_translation():
    """Cancel a running translation job."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    job_id = data.get("job_id")

    if not job_id:
        return jsonify({"error": i18n.get_translation("api.errors.job_id_required", lang=lang)}), 400

    runner = get_runner()
    if not runner.get(job_id):
        return jsonify({"error": i18n.get_translation("api.errors.job_not_found_or_expired", lang=lang)}), 404

    if runner.cancel(job_id):
        return jsonify({"status": "cancellation_requested", "job_id": job_id})
    return jsonify({"error": i18n.get_translation("api.errors.job_cannot_cancel", lang=lang)}), 400


@translation_bp.get("/translate/progress")
def get_translation_progress():
    """Return job state together with what the panel currently shows."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    job_id = request.args.get("job_id")
    include_history = request.args.get("history", "false").lower() in ("true", "1", "yes")

    if not job_id:
        return jsonify({"error": i18n.get_translation("api.errors.job_id_required", lang=lang)}), 400

    runner = get_runner()
    job = runner.get(job_id)
    if not job:
        return jsonify({"error": i18n.get_translation("api.errors.job_not_found_or_expired", lang=lang)}), 404

    return jsonify(serialize_job(job, runner.panel_owner.panel, include_history=include_history))


@translation_bp.get("/panel")
def get_panel():
    """Return the panel contents, or a placeholder when no panel is open."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    panel = get_runner().panel_owner.panel
    if panel is None:
        return jsonify({
            "open": False,
            "title": i18n.get_translation("panel.title", lang=lang),
            "message": {"text": i18n.get_translation("panel.waiting", lang=lang)},
        })
    payload = panel.to_dict(include_history=True)
    payload["open"] = True
    return jsonify(payload)


@translation_bp.delete("/panel")
def dispose_panel():
    """Close the panel, cancelling whatever is still writing to it."""
    disposed = get_runner().dispose_panel()
    return jsonify({"status": "disposed" if disposed else "not_open"})
