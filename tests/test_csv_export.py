"""
Tests for matrixquiz.csv_export.
"""

import csv
import io

from matrixquiz.csv_export import export_matrix_csv, export_specification_csv
from matrixquiz.export_utils import UTF8_BOM
from matrixquiz.matrix import add_contribution


def _read(text):
    assert text.startswith(UTF8_BOM)
    return list(csv.reader(io.StringIO(text[len(UTF8_BOM):])))


class TestMatrixCSV:
    def test_header(self, matrix_rows):
        rows = _read(export_matrix_csv(matrix_rows))
        header = rows[0]
        assert header[:4] == ["#", "Topic", "Knowledge unit", "Learning outcome"]
        assert header[4] == "Multiple choice - Recall"
        assert header[15] == "Essay - Apply"
        assert header[-3:] == ["Questions", "Points", "Percentage"]

    def test_data_rows(self, matrix_rows):
        rows = _read(export_matrix_csv(matrix_rows))
        first = rows[1]
        assert first[:4] == ["1", "Fractions", "Addition", "Adds fractions"]
        assert first[4] == "4"
        assert first[15] == "3"
        assert first[-3:] == ["7", "7.00", "70.00"]

    def test_totals_row(self, matrix_rows):
        rows = _read(export_matrix_csv(matrix_rows))
        total = rows[-4]
        assert total[1] == "Total"
        assert total[-3:] == ["9", "9.00", ""]
        assert len(rows) == 1 + len(matrix_rows) + 1 + 3

    def test_points_by_level_lines(self, matrix_rows):
        rows = _read(export_matrix_csv(matrix_rows))
        assert [(r[1], r[-2]) for r in rows[-3:]] == [
            ("Points (Recall)", "1.00"),
            ("Points (Understand)", "2.00"),
            ("Points (Apply)", "6.00"),
        ]

    def test_math_delimiters_literal(self):
        rows = add_contribution([], "Powers $x^2$", "Squares", "", "Essay", "Apply", 1)
        assert "Powers $x^2$" in export_matrix_csv(rows)

    def test_formula_injection_guard(self):
        rows = add_contribution([], "=HYPERLINK(1)", "Unit", "", "Essay", "Apply", 1)
        data = _read(export_matrix_csv(rows))
        assert data[1][1] == "'=HYPERLINK(1)"


class TestSpecificationCSV:
    def test_one_line_per_outcome(self, spec_items):
        rows = _read(export_specification_csv(spec_items))
        assert rows[0][:3] == ["Topic", "Knowledge unit", "Learning outcome"]
        assert rows[0][-1] == "Total"
        body = rows[1:-1]
        assert [r[2] for r in body] == [
            "Adds like fractions",
            "Adds unlike fractions",
            "Compares fractions",
            "Uses Pythagoras",
        ]
        assert body[0][-1] == "3"

    def test_totals_row(self, spec_items):
        rows = _read(export_specification_csv(spec_items))
        assert rows[-1][0] == "Total"
        assert rows[-1][-1] == "7"
