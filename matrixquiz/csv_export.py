"""
Delimited-text export of the matrix and the detailed specification.

Plain text only: math markers are written as the literal characters and
figures are not represented. Output starts with a UTF-8 BOM so spreadsheet
applications pick the right encoding for accented topic names.
"""

import csv
import io

from matrixquiz.export_utils import UTF8_BOM, sanitize_csv_cell
from matrixquiz.tables import column_headers, matrix_table, specification_table


def export_matrix_csv(rows) -> str:
    """Export the matrix, one line per row plus a totals line and the points
    allocated to each cognitive level.

    Args:
        rows: List of MatrixRow.

    Returns:
        CSV string with header, data rows and totals.
    """
    table = matrix_table(rows)
    output = io.StringIO()
    output.write(UTF8_BOM)
    writer = csv.writer(output)

    writer.writerow(
        ["#", "Topic", "Knowledge unit", "Learning outcome"]
        + column_headers()
        + ["Questions", "Points", "Percentage"]
    )
    for r in table.rows:
        writer.writerow(
            [
                r.number,
                sanitize_csv_cell(r.topic),
                sanitize_csv_cell(r.knowledge_unit),
                sanitize_csv_cell(r.learning_outcome),
            ]
            + r.cells
            + [r.questions, r.points_text, r.percentage_text]
        )
    writer.writerow(
        ["", "Total", "", ""] + table.column_totals + [table.total_questions, table.total_points_text, ""]
    )
    blanks = [""] * len(table.column_totals)
    for label, points_text in table.level_point_rows:
        writer.writerow(["", label, "", ""] + blanks + ["", points_text, ""])
    return output.getvalue()


def export_specification_csv(items) -> str:
    """Export the grouped specification, one line per learning outcome.

    Topic and unit are repeated on every line; spreadsheet users filter on
    them rather than relying on merged cells.
    """
    table = specification_table(items)
    output = io.StringIO()
    output.write(UTF8_BOM)
    writer = csv.writer(output)

    writer.writerow(["Topic", "Knowledge unit", "Learning outcome"] + column_headers() + ["Total"])
    for r in table.rows:
        writer.writerow(
            [
                sanitize_csv_cell(r.topic),
                sanitize_csv_cell(r.knowledge_unit),
                sanitize_csv_cell(r.learning_outcome),
            ]
            + r.cell_values()
            + [r.total]
        )
    writer.writerow(["Total", "", ""] + table.column_totals + [table.total_questions])
    return output.getvalue()
