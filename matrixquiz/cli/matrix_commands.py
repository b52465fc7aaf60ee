"""
Matrix editing, totals and specification grouping CLI commands.
"""

from matrixquiz.aggregation import matrix_summary
from matrixquiz.cli import load_document
from matrixquiz.exam_file import save_exam
from matrixquiz.matrix import add_contribution, set_cell
from matrixquiz.tables import matrix_table, specification_table
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, format_points


def register_matrix_commands(subparsers):
    """Register matrix subcommands."""

    # matrix-totals
    p = subparsers.add_parser("matrix-totals", help="Show the matrix with row and column totals.")
    p.add_argument("file", help="Exam document (YAML or JSON).")

    # matrix-add
    p = subparsers.add_parser("matrix-add", help="Add questions to a matrix cell, creating the row if needed.")
    p.add_argument("file", help="Exam document (YAML or JSON).")
    p.add_argument("--topic", required=True)
    p.add_argument("--unit", required=True, help="Knowledge unit.")
    p.add_argument("--outcome", default="", help="Learning outcome (kept only for a new row).")
    p.add_argument("--type", dest="question_type", required=True, help="Question type.")
    p.add_argument("--level", required=True, help="Cognitive level.")
    p.add_argument("--count", type=int, default=1)

    # matrix-set
    p = subparsers.add_parser("matrix-set", help="Overwrite one matrix cell.")
    p.add_argument("file", help="Exam document (YAML or JSON).")
    p.add_argument("row_id", help="Matrix row id.")
    p.add_argument("--type", dest="question_type", required=True, help="Question type.")
    p.add_argument("--level", required=True, help="Cognitive level.")
    p.add_argument("--value", type=int, required=True)

    # group-spec
    p = subparsers.add_parser("group-spec", help="Show the specification grouped by topic and unit.")
    p.add_argument("file", help="Exam document (YAML or JSON).")


def _cell_header():
    return " ".join(f"{t[:2]}{lvl[:2]:>3}" for t in QUESTION_TYPES for lvl in COGNITIVE_LEVELS)


def handle_matrix_totals(config, args):
    """Print the matrix table with its footer totals."""
    doc = load_document(config, args.file)
    if not doc.matrix:
        print("The matrix is empty.")
        return 0

    table = matrix_table(doc.matrix)
    print(f"\n{'#':>3}  {'Topic':<20} {'Unit':<20} {_cell_header()} {'Qs':>4} {'Pts':>6} {'%':>7}")
    for r in table.rows:
        cells = " ".join(f"{n:>5}" for n in r.cells)
        print(
            f"{r.number:>3}  {r.topic[:20]:<20} {r.knowledge_unit[:20]:<20} {cells}"
            f" {r.questions:>4} {r.points_text:>6} {r.percentage_text:>7}"
        )
    totals = " ".join(f"{n:>5}" for n in table.column_totals)
    print(f"{'':>3}  {'Total':<20} {'':<20} {totals} {table.total_questions:>4} {table.total_points_text:>6}")

    print("\nPoints by level:")
    for level, points in table.points_by_level.items():
        print(f"   {level:<12} {format_points(points)}")
    if not matrix_summary(doc.matrix)["submittable"]:
        print("\nThe matrix has no questions yet and cannot be submitted.")
    return 0


def handle_matrix_add(config, args):
    """Merge one contribution into the matrix and save the file."""
    doc = load_document(config, args.file)
    try:
        rows = add_contribution(
            doc.matrix, args.topic, args.unit, args.outcome, args.question_type, args.level, args.count
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if rows is doc.matrix:
        print("Error: topic and unit are required and the count must be at least 1.")
        return 1
    doc.matrix = rows
    save_exam(doc, args.file)
    print(f"[OK] Matrix now has {len(rows)} rows.")
    return 0


def handle_matrix_set(config, args):
    """Overwrite one cell and save the file."""
    doc = load_document(config, args.file)
    if not any(row.id == args.row_id for row in doc.matrix):
        print(f"Error: matrix row {args.row_id} not found.")
        return 1
    try:
        rows = set_cell(doc.matrix, args.row_id, args.question_type, args.level, args.value)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    doc.matrix = rows
    save_exam(doc, args.file)
    print("[OK] Cell updated.")
    return 0


def handle_group_spec(config, args):
    """Print the grouped specification as an indented tree."""
    doc = load_document(config, args.file)
    table = specification_table(doc.specification)
    if not table.rows:
        print("The specification is empty.")
        return 0
    for r in table.rows:
        if r.starts_topic:
            print(f"{r.topic}  ({r.topic_span} outcomes)")
        if r.starts_unit:
            print(f"   {r.knowledge_unit}  ({r.unit_span} outcomes)")
        detail = ", ".join(
            f"{q_type}/{level}: {n}"
            for q_type, levels in r.counts.items()
            for level, n in levels.items()
            if n
        )
        print(f"      - {r.learning_outcome} [{r.total}] {detail}")
    print(f"\nTotal questions: {table.total_questions}")
    return 0
