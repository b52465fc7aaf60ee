"""
Math preview and figure display API blueprint.
"""

import logging

from flask import Blueprint, jsonify

from matrixquiz.mathtext import MathRenderer, segment_math
from matrixquiz.taxonomy import text_value
from matrixquiz.web.blueprints.helpers import error_response, get_figure_board, json_body

logger = logging.getLogger(__name__)

render_bp = Blueprint("render", __name__)

_renderer = MathRenderer()


@render_bp.route("/api/render/math", methods=["POST"])
def render_math():
    """Render a text field with math for preview (``mode`` display or word)."""
    data = json_body()
    mode = data.get("mode", "display")
    if mode not in ("display", "word"):
        return error_response("mode must be 'display' or 'word'")
    try:
        text = text_value(data.get("text"), "text")
    except ValueError as e:
        return error_response(str(e))
    return jsonify(
        {
            "ok": True,
            "html": str(_renderer.render_text(text, mode=mode)),
            "fragments": [{"kind": f.kind, "content": f.content} for f in segment_math(text)],
        }
    )


@render_bp.route("/api/figures/<question_id>", methods=["POST"])
def display_figure(question_id):
    """Draw a question's figure and remember the snapshot for exports.

    A malformed program still answers 200 with the placeholder image.
    """
    try:
        source = text_value(json_body().get("drawing"), "drawing")
    except ValueError as e:
        return error_response(str(e))
    snap = get_figure_board().display(question_id, source)
    if snap is None:
        return jsonify({"ok": True, "image": None})
    return jsonify({"ok": True, "image": snap.data_uri, "width": snap.width, "height": snap.height})


@render_bp.route("/api/figures/<question_id>", methods=["DELETE"])
def forget_figure(question_id):
    get_figure_board().forget(question_id)
    return jsonify({"ok": True})
