"""
Tests for matrixquiz.matrix: contributions, cell edits, derived percentage.
"""

import itertools

import pytest

from matrixquiz.matrix import (
    MatrixRow,
    add_contribution,
    find_row,
    make_row,
    non_empty_rows,
    remove_row,
    row_points,
    row_question_count,
    set_cell,
)


class TestAddContribution:
    def test_worked_example(self):
        """3 Essay/Apply questions = 6 points = 60%."""
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 3)
        assert len(rows) == 1
        row = rows[0]
        assert row.cell("Essay", "Apply") == 3
        assert row_points(row.counts) == 6.0
        assert row.percentage == 60.0
        assert row_question_count(row) == 3

    def test_same_pair_merges_into_one_row(self):
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 3)
        rows = add_contribution(rows, "Fractions", "Addition", "", "Multiple choice", "Recall", 4)
        assert len(rows) == 1
        row = rows[0]
        assert row.cell("Essay", "Apply") == 3
        assert row.cell("Multiple choice", "Recall") == 4
        assert row.percentage == 70.0

    def test_repeated_cell_sums(self):
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 1)
        rows = add_contribution(rows, "Fractions", "Addition", "", "Essay", "Apply", 2)
        assert rows[0].cell("Essay", "Apply") == 3

    def test_outcome_set_once(self):
        rows = add_contribution([], "Fractions", "Addition", "First", "Essay", "Apply", 1)
        rows = add_contribution(rows, "Fractions", "Addition", "Second", "Essay", "Apply", 1)
        assert rows[0].learning_outcome == "First"

    def test_empty_outcome_filled_by_later_contribution(self):
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 1)
        rows = add_contribution(rows, "Fractions", "Addition", "Adds", "Essay", "Apply", 1)
        assert rows[0].learning_outcome == "Adds"

    def test_different_unit_appends_row(self):
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 1)
        rows = add_contribution(rows, "Fractions", "Subtraction", "", "Essay", "Apply", 1)
        assert [r.knowledge_unit for r in rows] == ["Addition", "Subtraction"]

    def test_blank_topic_or_unit_rejected(self):
        rows = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 1)
        assert add_contribution(rows, "   ", "Addition", "", "Essay", "Apply", 1) is rows
        assert add_contribution(rows, "Fractions", "", "", "Essay", "Apply", 1) is rows

    def test_count_below_one_rejected(self):
        rows = []
        assert add_contribution(rows, "Fractions", "Addition", "", "Essay", "Apply", 0) is rows
        assert add_contribution(rows, "Fractions", "Addition", "", "Essay", "Apply", -2) is rows

    def test_other_rows_are_same_objects(self, matrix_rows):
        geometry = matrix_rows[1]
        updated = add_contribution(matrix_rows, "Fractions", "Addition", "", "Essay", "Recall", 1)
        assert updated[1] is geometry
        assert updated is not matrix_rows

    def test_previous_snapshot_not_aliased(self):
        before = add_contribution([], "Fractions", "Addition", "", "Essay", "Apply", 1)
        after = add_contribution(before, "Fractions", "Addition", "", "Essay", "Apply", 1)
        assert before[0].cell("Essay", "Apply") == 1
        assert after[0].cell("Essay", "Apply") == 2
        assert before[0].counts is not after[0].counts


class TestSetCell:
    def test_overwrites_and_recomputes(self, matrix_rows):
        row_id = matrix_rows[0].id
        updated = set_cell(matrix_rows, row_id, "Essay", "Apply", 1)
        row = updated[0]
        assert row.cell("Essay", "Apply") == 1
        # 1 essay (2.0) + 4 MC (1.0) = 3 points
        assert row.percentage == 30.0
        assert row.id == row_id

    def test_negative_clamps_to_zero(self, matrix_rows):
        updated = set_cell(matrix_rows, matrix_rows[0].id, "Essay", "Apply", -5)
        assert updated[0].cell("Essay", "Apply") == 0

    def test_unknown_id_leaves_rows_unchanged(self, matrix_rows):
        updated = set_cell(matrix_rows, "missing", "Essay", "Apply", 9)
        assert updated == matrix_rows

    def test_original_rows_untouched(self, matrix_rows):
        set_cell(matrix_rows, matrix_rows[0].id, "Essay", "Apply", 0)
        assert matrix_rows[0].cell("Essay", "Apply") == 3


class TestRowHelpers:
    def test_remove_row(self, matrix_rows):
        remaining = remove_row(matrix_rows, matrix_rows[0].id)
        assert [r.topic for r in remaining] == ["Geometry"]

    def test_non_empty_rows_filters_zero_rows(self, matrix_rows):
        zeroed = set_cell(matrix_rows, matrix_rows[1].id, "True/False", "Understand", 0)
        assert [r.topic for r in non_empty_rows(zeroed)] == ["Fractions"]

    def test_make_row_copies_counts(self):
        counts = make_row("A", "B").counts
        row = make_row("A", "B", counts=counts)
        counts["Essay"]["Apply"] = 3
        assert row.cell("Essay", "Apply") == 0


class TestSerialization:
    def test_round_trip_keeps_id(self, matrix_rows):
        row = matrix_rows[0]
        restored = MatrixRow.from_dict(row.to_dict())
        assert restored == row

    def test_stored_percentage_is_recomputed(self):
        row = MatrixRow.from_dict(
            {"topic": "T", "knowledge_unit": "U", "counts": {"essay": {"apply": 1}}, "percentage": 99}
        )
        assert row.percentage == 20.0

    def test_camel_case_keys_and_negative_cells(self):
        row = MatrixRow.from_dict(
            {"topic": "T", "knowledgeUnit": "U", "learningOutcome": "O", "counts": {"Essay": {"Apply": -3}}}
        )
        assert row.knowledge_unit == "U"
        assert row.learning_outcome == "O"
        assert row.cell("Essay", "Apply") == 0

    def test_non_object_counts_rejected(self):
        with pytest.raises(ValueError, match="'counts'"):
            MatrixRow.from_dict({"topic": "A", "knowledge_unit": "B", "counts": [1, 2]})

    def test_non_object_row_rejected(self):
        with pytest.raises(ValueError):
            MatrixRow.from_dict("A")

    def test_list_topic_rejected(self):
        with pytest.raises(ValueError, match="'topic'"):
            MatrixRow.from_dict({"topic": ["A"], "knowledge_unit": "B"})

    def test_numeric_text_written_out(self):
        row = MatrixRow.from_dict({"topic": 5, "knowledge_unit": 2.5})
        assert (row.topic, row.knowledge_unit) == ("5", "2.5")


def _content(rows):
    """Row dicts without ids, in a stable order."""
    records = [{k: v for k, v in r.to_dict().items() if k != "id"} for r in rows]
    return sorted(records, key=lambda r: (r["topic"], r["knowledge_unit"]))


CONTRIBUTIONS = [
    ("Fractions", "Addition", "Adds fractions", "Essay", "Apply", 3),
    ("Fractions", "Addition", "", "Multiple choice", "Recall", 4),
    ("Fractions", "Addition", "", "Essay", "Apply", 1),
    ("Geometry", "Triangles", "", "True/False", "Understand", 2),
]


class TestAlgebraicProperties:
    def test_set_cell_is_idempotent(self, matrix_rows):
        row_id = matrix_rows[0].id
        once = set_cell(matrix_rows, row_id, "Short answer", "Understand", 5)
        twice = set_cell(once, row_id, "Short answer", "Understand", 5)
        assert [r.to_dict() for r in twice] == [r.to_dict() for r in once]

    def test_set_cell_to_current_value_changes_nothing(self, matrix_rows):
        row_id = matrix_rows[0].id
        same = set_cell(matrix_rows, row_id, "Essay", "Apply", 3)
        assert [r.to_dict() for r in same] == [r.to_dict() for r in matrix_rows]

    @pytest.mark.parametrize("order", list(itertools.permutations(range(len(CONTRIBUTIONS)))))
    def test_add_contribution_order_does_not_matter(self, order):
        expected = []
        for c in CONTRIBUTIONS:
            expected = add_contribution(expected, *c)
        rows = []
        for i in order:
            rows = add_contribution(rows, *CONTRIBUTIONS[i])
        assert _content(rows) == _content(expected)


class TestWhitespaceInKeys:
    def test_padded_topic_merges_with_plain(self):
        rows = add_contribution([], "Fractions ", "Addition", "", "Essay", "Apply", 1)
        rows = add_contribution(rows, " Fractions", " Addition ", "", "Essay", "Apply", 2)
        assert len(rows) == 1
        assert rows[0].topic == "Fractions"
        assert rows[0].knowledge_unit == "Addition"
        assert rows[0].cell("Essay", "Apply") == 3

    def test_find_row_ignores_padding(self, matrix_rows):
        assert find_row(matrix_rows, "  Geometry", "Triangles  ") is matrix_rows[1]

    def test_make_row_strips(self):
        row = make_row(topic=" Fractions ", knowledge_unit="\tAddition\n")
        assert (row.topic, row.knowledge_unit) == ("Fractions", "Addition")
