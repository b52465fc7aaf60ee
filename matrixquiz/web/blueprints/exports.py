"""
Export download blueprint.
"""

from io import BytesIO

from flask import Blueprint, abort, send_file

from matrixquiz.errors import ValidationError
from matrixquiz.exports import EXPORT_FORMATS, build_export
from matrixquiz.web.blueprints.helpers import app_config, error_response, get_figure_board, json_body, parse_document
from matrixquiz.word_export import DEFAULT_FIGURE_WIDTH

exports_bp = Blueprint("exports", __name__)


@exports_bp.route("/api/export/<format_name>", methods=["POST"])
def export(format_name):
    """Download an artifact for the posted exam document.

    Figures are taken from this session's snapshots only; a figure that has
    not been displayed yet is left out.
    """
    if format_name not in EXPORT_FORMATS:
        abort(404)
    try:
        doc = parse_document(json_body())
        artifact = build_export(
            doc,
            format_name,
            figures=get_figure_board(),
            figure_width=app_config().get("export", {}).get("figure_width", DEFAULT_FIGURE_WIDTH),
        )
    except ValidationError as e:
        return error_response(str(e))
    return send_file(
        BytesIO(artifact.content),
        as_attachment=True,
        download_name=artifact.filename,
        mimetype=artifact.mimetype,
    )
