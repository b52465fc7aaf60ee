"""Shared utilities for MatrixQuiz blueprint modules."""

import logging
import uuid

from flask import current_app, jsonify, request
from flask import session as flask_session

from matrixquiz.config import header_defaults
from matrixquiz.errors import GenerationError, ValidationError, classify_error
from matrixquiz.exam_file import document_from_dict
from matrixquiz.llm_provider import get_provider
from matrixquiz.matrix import MatrixRow
from matrixquiz.question_regenerator import QuestionRegenerator

logger = logging.getLogger(__name__)


def app_config():
    return current_app.config["APP_CONFIG"]


def json_body():
    """The request's JSON object, or ``{}``."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(message, status=400, **extra):
    return jsonify({"ok": False, "error": message, **extra}), status


def generation_error_response(exc):
    """JSON error for a failed generation call.

    Credential failures answer 401 with ``reauthorize`` so the client can
    ask for a new API key; anything else is a 502.
    """
    logger.error("Generation failed (%s): %s", exc.kind, exc)
    if exc.needs_reauthorization:
        return error_response("The API key is missing or was rejected.", 401, reauthorize=True)
    return error_response("Generation failed. Check your provider settings and try again.", 502)


def parse_matrix(data):
    """Matrix rows from ``data["matrix"]``.

    Raises:
        ValidationError: for a non-list matrix or an unknown type/level.
    """
    records = data.get("matrix") or []
    if not isinstance(records, list):
        raise ValidationError("'matrix' must be a list.")
    try:
        return [MatrixRow.from_dict(r) for r in records]
    except ValueError as e:
        raise ValidationError(str(e)) from e


def parse_document(data):
    return document_from_dict(data, header_defaults(app_config()))


def get_figure_board():
    """The FigureBoard for the current browser session."""
    board_id = flask_session.get("figure_board")
    if not board_id:
        board_id = uuid.uuid4().hex
        flask_session["figure_board"] = board_id
    return current_app.config["FIGURE_BOARDS"].get(board_id)


def get_llm_provider():
    """The configured provider; a test may inject one as ``LLM_PROVIDER``.

    Raises:
        GenerationError: if the provider cannot be built, e.g. no API key.
    """
    provider = current_app.config.get("LLM_PROVIDER")
    if provider is None:
        try:
            provider = get_provider(app_config())
        except ValueError as e:
            raise GenerationError(str(e), kind=classify_error(e)) from e
    return provider


def get_regenerator():
    regenerator = current_app.config.get("REGENERATOR")
    if regenerator is None:
        regenerator = QuestionRegenerator(get_llm_provider())
        current_app.config["REGENERATOR"] = regenerator
    return regenerator
