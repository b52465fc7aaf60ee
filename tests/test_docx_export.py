"""
Tests for matrixquiz.docx_export (native Word documents).
"""

import zipfile

from docx import Document

from matrixquiz.docx_export import export_exam_docx, export_matrix_docx, export_specification_docx
from matrixquiz.figures import FigureBoard


def _all_text(doc):
    return "\n".join(p.text for p in doc.paragraphs)


class TestExamDocx:
    def test_is_valid_zip(self, header, questions):
        buf = export_exam_docx(header, questions)
        assert zipfile.is_zipfile(buf)

    def test_sections_and_key(self, header, questions):
        doc = Document(export_exam_docx(header, questions))
        text = _all_text(doc)
        assert "PART I. OBJECTIVE QUESTIONS (1.25 points)" in text
        assert "PART II. ESSAY QUESTIONS (2.00 points)" in text
        assert "ANSWER KEY AND GRADING GUIDE" in text
        assert "Question 3: Find BC." in text

    def test_objective_answer_grid(self, header, questions):
        doc = Document(export_exam_docx(header, questions))
        grid = doc.tables[-1]
        assert grid.cell(0, 0).text == "Question"
        assert grid.cell(1, 1).text == "B"
        assert grid.cell(1, 2).text == "True"

    def test_header_table(self, header, questions):
        doc = Document(export_exam_docx(header, questions))
        school_cell = doc.tables[0].cell(0, 2).text
        assert "Riverside High" in school_cell
        assert "Exam code 101" in school_cell

    def test_no_images_without_snapshots(self, header, questions):
        doc = Document(export_exam_docx(header, questions, figures=FigureBoard()))
        assert len(doc.inline_shapes) == 0

    def test_displayed_figure_inserted_twice(self, header, questions):
        board = FigureBoard()
        board.display("q3", questions[2].drawing)
        doc = Document(export_exam_docx(header, questions, figures=board))
        assert len(doc.inline_shapes) == 2


class TestMatrixDocx:
    def test_rows_and_footer(self, matrix_rows, header):
        doc = Document(export_matrix_docx(matrix_rows, header))
        table = doc.tables[0]
        # 3 header rows + 2 data rows + totals + one points line per level
        assert len(table.rows) == 9
        assert table.cell(3, 1).text == "Fractions"
        assert table.cell(3, 3).text == "Adds fractions"
        assert table.cell(3, table_cols(table) - 1).text == "70.00"
        assert table.cell(5, 0).text == "Total"
        assert table.cell(5, table_cols(table) - 2).text == "9.00"
        assert table.cell(6, 0).text == "Points (Recall)"
        assert table.cell(8, table_cols(table) - 2).text == "6.00"


def table_cols(table):
    return len(table.columns)


class TestSpecificationDocx:
    def test_topic_and_unit_cells_merged(self, spec_items, header):
        doc = Document(export_specification_docx(spec_items, header))
        table = doc.tables[0]
        assert len(table.rows) == 3 + 4 + 1
        assert table.cell(3, 0)._tc is table.cell(5, 0)._tc
        assert table.cell(3, 0)._tc is not table.cell(6, 0)._tc
        assert table.cell(3, 1)._tc is table.cell(4, 1)._tc
        assert table.cell(3, 0).text == "Fractions"
        assert table.cell(6, 0).text == "Geometry"

    def test_footer_total(self, spec_items, header):
        doc = Document(export_specification_docx(spec_items, header))
        table = doc.tables[0]
        assert table.cell(len(table.rows) - 1, len(table.columns) - 1).text == "7"
