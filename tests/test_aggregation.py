"""
Tests for matrixquiz.aggregation.
"""

from matrixquiz.aggregation import (
    column_totals,
    grand_total_points,
    is_submittable,
    matrix_summary,
    points_by_level,
    points_by_type,
    specification_column_totals,
    total_questions,
)
from matrixquiz.matrix import make_row, set_cell


class TestColumnTotals:
    def test_empty_matrix_all_zero(self):
        totals = column_totals([])
        assert total_questions(totals) == 0
        assert all(v == 0 for levels in totals.values() for v in levels.values())

    def test_sums_across_rows(self, matrix_rows):
        totals = column_totals(matrix_rows)
        assert totals["Essay"]["Apply"] == 3
        assert totals["Multiple choice"]["Recall"] == 4
        assert totals["True/False"]["Understand"] == 2
        assert total_questions(totals) == 9

    def test_specification_totals(self, spec_items):
        totals = specification_column_totals(spec_items)
        assert totals["Essay"]["Apply"] == 2
        assert totals["True/False"]["Recall"] == 2
        assert total_questions(totals) == 7


class TestPoints:
    def test_points_by_level(self, matrix_rows):
        by_level = points_by_level(column_totals(matrix_rows))
        assert by_level == {"Recall": 1.0, "Understand": 2.0, "Apply": 6.0}

    def test_points_by_type(self, matrix_rows):
        by_type = points_by_type(column_totals(matrix_rows))
        assert by_type["Essay"] == 6.0
        assert by_type["Short answer"] == 0

    def test_grand_total_matches_sum_of_rows(self, matrix_rows):
        totals = column_totals(matrix_rows)
        assert grand_total_points(totals) == sum(r.points for r in matrix_rows) == 9.0


class TestSubmittable:
    def test_no_rows(self):
        assert is_submittable([]) is False

    def test_rows_without_questions(self):
        assert is_submittable([make_row("T", "U")]) is False

    def test_rows_with_questions(self, matrix_rows):
        assert is_submittable(matrix_rows) is True

    def test_becomes_false_when_cells_cleared(self, matrix_rows):
        rows = set_cell(matrix_rows, matrix_rows[0].id, "Essay", "Apply", 0)
        rows = set_cell(rows, rows[0].id, "Multiple choice", "Recall", 0)
        rows = set_cell(rows, rows[1].id, "True/False", "Understand", 0)
        assert is_submittable(rows) is False

    def test_summary(self, matrix_rows):
        summary = matrix_summary(matrix_rows)
        assert summary["total_questions"] == 9
        assert summary["grand_total_points"] == 9.0
        assert summary["submittable"] is True
