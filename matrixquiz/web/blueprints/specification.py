"""
Specification grouping API blueprint.
"""

from flask import Blueprint, jsonify

from matrixquiz.errors import ValidationError
from matrixquiz.grouping import group_specification
from matrixquiz.specification import parse_specification
from matrixquiz.tables import specification_table
from matrixquiz.web.blueprints.helpers import error_response, json_body

specification_bp = Blueprint("specification", __name__)


@specification_bp.route("/api/specification/group", methods=["POST"])
def group():
    """Group a flat specification list into the nested table layout.

    Returns the sparse tree plus the ordered leaf rows with their spans,
    which is what a nested-header table needs.
    """
    records = json_body().get("specification") or []
    if not isinstance(records, list):
        return error_response("'specification' must be a list.")
    try:
        items = parse_specification(records)
    except (ValidationError, ValueError) as e:
        return error_response(str(e))

    table = specification_table(items)
    rows = [
        {
            "topic": r.topic,
            "knowledge_unit": r.knowledge_unit,
            "learning_outcome": r.learning_outcome,
            "counts": r.counts,
            "total": r.total,
            "topic_span": r.topic_span,
            "unit_span": r.unit_span,
        }
        for r in table.rows
    ]
    return jsonify(
        {
            "ok": True,
            "grouped": group_specification(items).to_dict(),
            "rows": rows,
            "column_totals": table.column_totals,
            "total_questions": table.total_questions,
        }
    )
