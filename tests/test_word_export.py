"""
Tests for matrixquiz.word_export (Word-compatible HTML documents).
"""

from matrixquiz.export_utils import UTF8_BOM
from matrixquiz.figures import FigureBoard
from matrixquiz.word_export import export_exam_word, export_matrix_word, export_specification_word


class TestExamWord:
    def test_starts_with_bom_and_word_namespaces(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        assert html.startswith(UTF8_BOM)
        assert 'xmlns:w="urn:schemas-microsoft-com:office:word"' in html

    def test_sections_use_computed_points(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        assert "PART I. OBJECTIVE QUESTIONS (1.25 points)" in html
        assert "PART II. ESSAY QUESTIONS (2.00 points)" in html

    def test_questions_numbered_across_sections(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        assert "Question 1:" in html
        assert "Question 3:" in html

    def test_header_fields(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        assert "Riverside High" in html
        assert "Mathematics 7" in html
        assert "90 minutes" in html
        assert "Exam code 101" in html

    def test_math_is_clean_mathml(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        assert "<math" in html
        assert "annotation" not in html
        assert 'xmlns="http://www.w3.org/1998/Math/MathML"' in html

    def test_answer_key(self, header, questions, renderer):
        html = export_exam_word(header, questions, renderer=renderer)
        key = html.split("ANSWER KEY AND GRADING GUIDE", 1)[1]
        assert "page-break-before" in html
        assert "Use Pythagoras (2 points)." in key
        assert "Answer:" in key

    def test_figure_omitted_when_never_displayed(self, header, questions, renderer):
        html = export_exam_word(header, questions, figures=FigureBoard(), renderer=renderer)
        assert "data:image/png;base64," not in html

    def test_displayed_figure_embedded_in_question_and_key(self, header, questions, renderer):
        board = FigureBoard()
        board.display("q3", questions[2].drawing)
        html = export_exam_word(header, questions, figures=board, renderer=renderer)
        assert html.count("data:image/png;base64,") == 2
        assert 'width="350"' in html
        assert 'width="200"' in html

    def test_text_is_escaped(self, header, renderer):
        from matrixquiz.questions import Question

        qs = [Question(id="x", question_type="Multiple choice", prompt="<script>alert(1)</script>")]
        html = export_exam_word(header, qs, renderer=renderer)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestMatrixWord:
    def test_rows_and_totals(self, matrix_rows, header):
        html = export_matrix_word(matrix_rows, header)
        assert "ASSESSMENT MATRIX" in html
        assert "Fractions" in html and "Geometry" in html
        assert "70.00" in html
        assert "9.00" in html
        assert "<th rowspan=\"3\">Learning outcome</th>" in html
        assert "Adds fractions" in html
        assert "Points (Apply)" in html and "6.00" in html


class TestSpecificationWord:
    def test_rowspans(self, spec_items, header, renderer):
        html = export_specification_word(spec_items, header, renderer)
        assert "DETAILED SPECIFICATION" in html
        assert 'rowspan="3"' in html
        assert 'rowspan="2"' in html
        # Each topic cell is emitted once
        assert html.count(">Fractions<") == 1

    def test_outcome_math_rendered(self, header, renderer):
        from matrixquiz.specification import SpecificationItem

        items = [SpecificationItem("Powers", "Squares", "Computes $x^2$", "Essay", "Apply", 1)]
        html = export_specification_word(items, header, renderer)
        assert "<math" in html
