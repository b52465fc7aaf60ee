"""
Native Word (``.docx``) export of the exam, the matrix and the specification.

Built with python-docx. Word has no MathML import through python-docx, so
math fragments keep their linear TeX source in a Cambria Math run; figures
are inserted from the snapshots kept by the ``FigureBoard``.
"""

import io
import logging
from typing import Optional

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.shared import Inches, Pt

from matrixquiz.figures import FigureBoard
from matrixquiz.mathtext import BLOCK, segment_math
from matrixquiz.questions import ExamHeader, section_points, split_sections
from matrixquiz.tables import MATRIX_TITLE, SPECIFICATION_TITLE, matrix_table, specification_table
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, format_points

logger = logging.getLogger(__name__)

BODY_FONT = "Times New Roman"
MATH_FONT = "Cambria Math"
FIGURE_WIDTH = Inches(3.6)
KEY_FIGURE_WIDTH = Inches(2.1)


def _new_document():
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = BODY_FONT
    style.font.size = Pt(11)
    return doc


def _add_rich_text(paragraph, text, size=None):
    """Append ``text`` to ``paragraph``, putting math fragments in a math-font run."""
    for frag in segment_math(text):
        if not frag.is_math:
            run = paragraph.add_run(frag.content)
        else:
            content = frag.content.strip()
            if frag.kind == BLOCK:
                paragraph.add_run().add_break()
                run = paragraph.add_run(content)
                run.add_break()
            else:
                run = paragraph.add_run(content)
            run.font.name = MATH_FONT
            run.italic = True
        if size:
            run.font.size = size


def _set_cell(cell, text, bold=False, size=Pt(9), align=WD_ALIGN_PARAGRAPH.CENTER, rich=False):
    p = cell.paragraphs[0]
    p.alignment = align
    if rich:
        _add_rich_text(p, text, size=size)
        for run in p.runs:
            run.bold = bold or run.bold
        return
    run = p.add_run("" if text is None else str(text))
    run.bold = bold
    run.font.size = size


def _centered_heading(doc, text, level=1):
    heading = doc.add_heading(text, level=level)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
    return heading


def _grid_header(table, leading, trailing):
    """Fill the three header rows: fixed labels, question types, levels.

    ``leading``/``trailing`` columns are merged vertically across the three
    rows; each type label spans its level columns.
    """
    n_levels = len(COGNITIVE_LEVELS)
    first = len(leading)
    rows = table.rows[:3]

    for i, label in enumerate(leading):
        merged = rows[0].cells[i].merge(rows[2].cells[i])
        _set_cell(merged, label, bold=True)
    grid_last = first + len(QUESTION_TYPES) * n_levels - 1
    top = rows[0].cells[first].merge(rows[0].cells[grid_last])
    _set_cell(top, "Assessment levels", bold=True)
    for t, q_type in enumerate(QUESTION_TYPES):
        start = first + t * n_levels
        span = rows[1].cells[start].merge(rows[1].cells[start + n_levels - 1])
        _set_cell(span, q_type, bold=True)
        for l, level in enumerate(COGNITIVE_LEVELS):
            _set_cell(rows[2].cells[start + l], level, bold=True, size=Pt(8))
    for j, label in enumerate(trailing):
        col = grid_last + 1 + j
        merged = rows[0].cells[col].merge(rows[2].cells[col])
        _set_cell(merged, label, bold=True)


def _grid_table(doc, leading, trailing):
    cols = len(leading) + len(QUESTION_TYPES) * len(COGNITIVE_LEVELS) + len(trailing)
    table = doc.add_table(rows=3, cols=cols)
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    _grid_header(table, leading, trailing)
    return table


def _to_buffer(doc) -> io.BytesIO:
    buf = io.BytesIO()
    doc.save(buf)
    buf.seek(0)
    return buf


# ---------------------------------------------------------------------------
# Exam
# ---------------------------------------------------------------------------


def _exam_header(doc, header: ExamHeader):
    table = doc.add_table(rows=2, cols=4)
    table.style = "Table Grid"

    student = table.cell(0, 0).merge(table.cell(0, 1))
    _set_cell(student, "Full name: ...................................", bold=True, align=WD_ALIGN_PARAGRAPH.LEFT)
    student.add_paragraph("Class: ....................").runs[0].bold = True

    school = table.cell(0, 2).merge(table.cell(1, 2))
    lines = [header.authority, header.school, header.title]
    if header.school_year:
        lines.append(f"School year: {header.school_year}")
    lines += [f"Subject: {header.subject_line}", f"Time: {header.duration_line}", f"Exam code {header.exam_code}"]
    lines = [line for line in lines if line]
    _set_cell(school, lines[0], bold=True, size=Pt(10))
    for line in lines[1:]:
        p = school.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = p.add_run(line)
        run.bold = True
        run.font.size = Pt(10)

    invigilators = table.cell(0, 3).merge(table.cell(1, 3))
    _set_cell(invigilators, "Invigilator name and signature", bold=True)
    for _ in range(2):
        invigilators.add_paragraph("\n.............................").alignment = WD_ALIGN_PARAGRAPH.CENTER

    _set_cell(table.cell(1, 0), "Objective score", bold=True)
    _set_cell(table.cell(1, 1), "Total score", bold=True)


def _add_figure(doc, question, figures, width):
    if figures is None or not question.has_drawing:
        return
    snap = figures.snapshot(question.id)
    if snap is None:
        return
    doc.add_picture(snap.as_stream(), width=width)
    doc.paragraphs[-1].alignment = WD_ALIGN_PARAGRAPH.CENTER


def _add_question(doc, number, question, figures):
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
    p.add_run(f"Question {number}: ").bold = True
    _add_rich_text(p, question.prompt)
    _add_figure(doc, question, figures, FIGURE_WIDTH)


def export_exam_docx(
    header: ExamHeader,
    questions,
    figures: Optional[FigureBoard] = None,
) -> io.BytesIO:
    """Export the exam paper and its answer key as a Word document.

    Args:
        header: Exam header block.
        questions: List of Question in display order.
        figures: Board of figure snapshots; questions whose figure was never
            displayed are exported without an image.

    Returns:
        BytesIO buffer containing the .docx file.
    """
    doc = _new_document()
    _exam_header(doc, header)
    objective, essay = split_sections(questions)

    if objective:
        doc.add_paragraph().add_run(
            f"PART I. OBJECTIVE QUESTIONS ({format_points(section_points(objective))} points)"
        ).bold = True
        for i, q in enumerate(objective, start=1):
            _add_question(doc, i, q, figures)

    if essay:
        doc.add_paragraph().add_run(
            f"PART II. ESSAY QUESTIONS ({format_points(section_points(essay))} points)"
        ).bold = True
        for i, q in enumerate(essay, start=len(objective) + 1):
            _add_question(doc, i, q, figures)

    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
    _centered_heading(doc, "ANSWER KEY AND GRADING GUIDE", level=2)

    if objective:
        doc.add_paragraph().add_run("I. OBJECTIVE QUESTIONS").bold = True
        table = doc.add_table(rows=2, cols=len(objective) + 1)
        table.style = "Table Grid"
        _set_cell(table.cell(0, 0), "Question", bold=True)
        _set_cell(table.cell(1, 0), "Answer", bold=True)
        for i, q in enumerate(objective, start=1):
            _set_cell(table.cell(0, i), i)
            _set_cell(table.cell(1, i), q.answer, bold=True, rich=True)

    if essay:
        doc.add_paragraph().add_run("II. ESSAY QUESTIONS").bold = True
        for i, q in enumerate(essay, start=len(objective) + 1):
            doc.add_paragraph().add_run(f"Question {i}:").bold = True
            _add_rich_text(doc.add_paragraph(), q.rubric)
            _add_figure(doc, q, figures, KEY_FIGURE_WIDTH)
            p = doc.add_paragraph()
            p.add_run("Answer: ").bold = True
            _add_rich_text(p, q.answer)

    return _to_buffer(doc)


# ---------------------------------------------------------------------------
# Matrix and specification
# ---------------------------------------------------------------------------


def export_matrix_docx(rows, header: Optional[ExamHeader] = None) -> io.BytesIO:
    """Export the matrix as a Word table with a totals row."""
    header = header or ExamHeader()
    data = matrix_table(rows)
    doc = _new_document()
    _centered_heading(doc, MATRIX_TITLE)
    if header.title:
        doc.add_paragraph(header.title).alignment = WD_ALIGN_PARAGRAPH.CENTER

    leading = ["#", "Topic", "Knowledge unit", "Learning outcome"]
    table = _grid_table(doc, leading, ["Questions", "Points", "Percentage"])
    for r in data.rows:
        cells = table.add_row().cells
        values = [r.number, r.topic, r.knowledge_unit, r.learning_outcome] + [n or "" for n in r.cells]
        values += [r.questions, r.points_text, r.percentage_text]
        for i, value in enumerate(values):
            align = WD_ALIGN_PARAGRAPH.LEFT if i in (1, 2, 3) else WD_ALIGN_PARAGRAPH.CENTER
            _set_cell(cells[i], value, align=align, rich=(i == 3))

    footer = table.add_row().cells
    _set_cell(footer[0].merge(footer[len(leading) - 1]), "Total", bold=True)
    totals = data.column_totals + [data.total_questions, data.total_points_text, ""]
    for i, value in enumerate(totals, start=len(leading)):
        _set_cell(footer[i], value, bold=True)

    for label, points_text in data.level_point_rows:
        line = table.add_row().cells
        _set_cell(line[0].merge(line[len(leading) - 1]), label, bold=True)
        _set_cell(line[-2], points_text, bold=True)
    return _to_buffer(doc)


def export_specification_docx(items, header: Optional[ExamHeader] = None) -> io.BytesIO:
    """Export the grouped specification; topic and unit cells are merged vertically."""
    header = header or ExamHeader()
    data = specification_table(items)
    doc = _new_document()
    _centered_heading(doc, SPECIFICATION_TITLE)
    if header.title:
        doc.add_paragraph(header.title).alignment = WD_ALIGN_PARAGRAPH.CENTER

    table = _grid_table(doc, ["Topic", "Knowledge unit", "Learning outcome"], ["Total"])
    first_data_row = len(table.rows)
    for r in data.rows:
        cells = table.add_row().cells
        if r.starts_topic:
            _set_cell(cells[0], r.topic, align=WD_ALIGN_PARAGRAPH.LEFT, rich=True)
        if r.starts_unit:
            _set_cell(cells[1], r.knowledge_unit, align=WD_ALIGN_PARAGRAPH.LEFT, rich=True)
        _set_cell(cells[2], r.learning_outcome, align=WD_ALIGN_PARAGRAPH.LEFT, rich=True)
        for i, n in enumerate(r.cell_values(), start=3):
            _set_cell(cells[i], n or "")
        _set_cell(cells[-1], r.total)

    for offset, r in enumerate(data.rows):
        row_index = first_data_row + offset
        if r.topic_span > 1:
            table.cell(row_index, 0).merge(table.cell(row_index + r.topic_span - 1, 0))
        if r.unit_span > 1:
            table.cell(row_index, 1).merge(table.cell(row_index + r.unit_span - 1, 1))

    footer = table.add_row().cells
    _set_cell(footer[0].merge(footer[2]), "Total questions", bold=True)
    for i, value in enumerate(data.column_totals + [data.total_questions], start=3):
        _set_cell(footer[i], value, bold=True)
    return _to_buffer(doc)
