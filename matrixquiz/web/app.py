"""
Flask application factory for the MatrixQuiz web service.
"""

import os
import secrets

from flask import Flask
from flask_wtf.csrf import CSRFProtect

from matrixquiz.config import load_config, setup_logging
from matrixquiz.figures import CANVAS_HEIGHT, CANVAS_WIDTH, DEFAULT_MAX_BOARDS, FigureBoardStore
from matrixquiz.web.blueprints import register_blueprints

csrf = CSRFProtect()

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "templates", "web")


def create_app(config=None):
    """
    Create and configure the Flask application.

    Args:
        config: Application config dict. If None, loads config.yaml.

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__, template_folder=os.path.abspath(TEMPLATE_DIR))

    if config is None:
        config = load_config()
        setup_logging(config)
    app.config["APP_CONFIG"] = config

    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY") or secrets.token_hex(32)
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # 5 MB request limit
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    if os.environ.get("FLASK_HTTPS"):
        app.config["SESSION_COOKIE_SECURE"] = True

    # Figure snapshots per browser session, keyed by the id kept in the
    # session cookie and capped at figures.max_sessions boards. Regenerators
    # are shared so single-flight holds across requests.
    fig_cfg = config.get("figures", {})
    app.config["FIGURE_BOARDS"] = FigureBoardStore(
        fig_cfg.get("max_sessions", DEFAULT_MAX_BOARDS),
        fig_cfg.get("width", CANVAS_WIDTH),
        fig_cfg.get("height", CANVAS_HEIGHT),
    )
    app.config["REGENERATOR"] = None

    csrf.init_app(app)
    register_blueprints(app)
    return app
