"""
Word-compatible markup export (``.doc``).

Builds self-contained HTML that Word opens as a document: math is embedded
as namespaced MathML and figures as inline base64 PNG snapshots. Three
documents share the templates under ``templates/word``: the full exam with
its answer key, the matrix, and the detailed specification.
"""

import logging
import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from matrixquiz.export_utils import UTF8_BOM
from matrixquiz.figures import FigureBoard
from matrixquiz.mathtext import MathRenderer
from matrixquiz.questions import ExamHeader, section_points, split_sections
from matrixquiz.tables import (
    MATRIX_TITLE,
    SPECIFICATION_TITLE,
    matrix_table,
    specification_table,
)
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, format_points

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates", "word")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

DEFAULT_FIGURE_WIDTH = 350
ANSWER_KEY_FIGURE_WIDTH = 200


def _grid_context():
    return {"question_types": QUESTION_TYPES, "levels": COGNITIVE_LEVELS}


def export_exam_word(
    header: ExamHeader,
    questions,
    figures: Optional[FigureBoard] = None,
    renderer: Optional[MathRenderer] = None,
    figure_width: int = DEFAULT_FIGURE_WIDTH,
) -> str:
    """Render the exam paper followed by the answer key.

    Args:
        header: Exam header block.
        questions: List of Question, in display order.
        figures: Board holding snapshots of figures already displayed.
            Questions whose figure has no snapshot are exported without it.
        renderer: Math renderer (defaults to latex2mathml-backed).
        figure_width: Width in px of figures in the question body.

    Returns:
        The document text, BOM included.
    """
    renderer = renderer or MathRenderer()
    objective, essay = split_sections(questions)

    def render_math(text):
        return renderer.render_text(text, mode="word")

    def figure_uri(question):
        if not question.has_drawing or figures is None:
            return ""
        snap = figures.snapshot(question.id)
        return snap.data_uri if snap else ""

    html = _env.get_template("exam.html").render(
        header=header,
        objective=objective,
        essay=essay,
        objective_points=format_points(section_points(objective)),
        essay_points=format_points(section_points(essay)),
        render_math=render_math,
        figure_uri=figure_uri,
        figure_width=figure_width,
        key_figure_width=ANSWER_KEY_FIGURE_WIDTH,
    )
    return UTF8_BOM + html


def export_matrix_word(rows, header: Optional[ExamHeader] = None) -> str:
    """Render the matrix as a Word table with a totals footer."""
    html = _env.get_template("matrix.html").render(
        title=MATRIX_TITLE,
        header=header or ExamHeader(),
        table=matrix_table(rows),
        **_grid_context(),
    )
    return UTF8_BOM + html


def export_specification_word(items, header: Optional[ExamHeader] = None, renderer: Optional[MathRenderer] = None) -> str:
    """Render the detailed specification with merged topic and unit cells."""
    renderer = renderer or MathRenderer()
    html = _env.get_template("specification.html").render(
        title=SPECIFICATION_TITLE,
        header=header or ExamHeader(),
        table=specification_table(items),
        render_math=lambda text: renderer.render_text(text, mode="word"),
        **_grid_context(),
    )
    return UTF8_BOM + html
