"""
Matrix editing API blueprint.

The client owns the matrix: every request carries the current rows and gets
back the edited rows together with the recomputed totals.
"""

from flask import Blueprint, jsonify

from matrixquiz.aggregation import matrix_summary
from matrixquiz.errors import ValidationError
from matrixquiz.matrix import add_contribution, remove_row, set_cell
from matrixquiz.taxonomy import text_value
from matrixquiz.web.blueprints.helpers import error_response, json_body, parse_matrix

matrix_bp = Blueprint("matrix", __name__)


def _matrix_response(rows, **extra):
    return jsonify({"ok": True, "matrix": [r.to_dict() for r in rows], "summary": matrix_summary(rows), **extra})


@matrix_bp.route("/api/matrix/summary", methods=["POST"])
def summary():
    try:
        rows = parse_matrix(json_body())
    except ValidationError as e:
        return error_response(str(e))
    return _matrix_response(rows)


@matrix_bp.route("/api/matrix/contributions", methods=["POST"])
def contribute():
    """Add questions of one type and level to a (topic, unit) row.

    A blank topic or unit, or a count below 1, leaves the matrix unchanged
    and reports ``changed: false``.
    """
    data = json_body()
    try:
        rows = parse_matrix(data)
        count = int(data.get("count", 1))
        updated = add_contribution(
            rows,
            text_value(data.get("topic"), "topic"),
            text_value(data.get("knowledge_unit"), "knowledge_unit"),
            text_value(data.get("learning_outcome"), "learning_outcome"),
            data.get("question_type", ""),
            data.get("cognitive_level", ""),
            count,
        )
    except (ValidationError, ValueError, TypeError) as e:
        return error_response(str(e))
    return _matrix_response(updated, changed=updated is not rows)


@matrix_bp.route("/api/matrix/rows/<row_id>/cell", methods=["PUT"])
def update_cell(row_id):
    """Overwrite one cell; negative values are stored as 0."""
    data = json_body()
    try:
        rows = parse_matrix(data)
        if not any(r.id == row_id for r in rows):
            return error_response("Matrix row not found", 404)
        updated = set_cell(rows, row_id, data.get("question_type", ""), data.get("cognitive_level", ""), data.get("value", 0))
    except (ValidationError, ValueError) as e:
        return error_response(str(e))
    return _matrix_response(updated)


@matrix_bp.route("/api/matrix/rows/<row_id>", methods=["DELETE"])
def delete_row(row_id):
    try:
        rows = parse_matrix(json_body())
    except ValidationError as e:
        return error_response(str(e))
    return _matrix_response(remove_row(rows, row_id))
