"""
Settings blueprint: display theme and API key re-authorization.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from matrixquiz.config import save_api_key_to_env
from matrixquiz.preferences import THEME_COOKIE, THEME_COOKIE_MAX_AGE, THEMES, resolve_theme
from matrixquiz.web.blueprints.helpers import error_response, json_body

logger = logging.getLogger(__name__)

settings_bp = Blueprint("settings", __name__)


@settings_bp.route("/api/settings/theme", methods=["GET"])
def get_theme():
    return jsonify({"ok": True, "theme": resolve_theme(request.cookies.get(THEME_COOKIE)), "themes": THEMES})


@settings_bp.route("/api/settings/theme", methods=["PUT"])
def set_theme():
    """Store the theme in a long-lived cookie; unknown names fall back to the default."""
    theme = resolve_theme(json_body().get("theme"))
    response = jsonify({"ok": True, "theme": theme})
    response.set_cookie(THEME_COOKIE, theme, max_age=THEME_COOKIE_MAX_AGE, samesite="Lax")
    return response


@settings_bp.route("/api/settings/api-key", methods=["POST"])
def set_api_key():
    """Save a new Gemini API key to .env and drop the cached provider."""
    api_key = json_body().get("api_key")
    api_key = api_key.strip() if isinstance(api_key, str) else ""
    if not api_key:
        return error_response("API key cannot be empty")
    save_api_key_to_env("GEMINI_API_KEY", api_key, current_app.config.get("ENV_PATH", ".env"))
    current_app.config["REGENERATOR"] = None
    logger.info("Gemini API key updated")
    return jsonify({"ok": True})
