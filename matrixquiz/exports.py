"""
One entry point for every downloadable artifact.

``build_export(doc, fmt, ...)`` returns the file name, MIME type and bytes
for an export format, so the CLI and the web layer name and encode files
the same way.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from matrixquiz.csv_export import export_matrix_csv, export_specification_csv
from matrixquiz.docx_export import export_exam_docx, export_matrix_docx, export_specification_docx
from matrixquiz.errors import ValidationError
from matrixquiz.export_utils import (
    CSV_MIMETYPE,
    DOC_MIMETYPE,
    DOCX_MIMETYPE,
    TEX_MIMETYPE,
    exam_filename,
    matrix_filename,
    specification_filename,
)
from matrixquiz.figures import FigureBoard
from matrixquiz.latex_export import export_exam_latex, export_matrix_latex, export_specification_latex
from matrixquiz.mathtext import MathRenderer
from matrixquiz.questions import ExamDocument
from matrixquiz.word_export import DEFAULT_FIGURE_WIDTH, export_exam_word, export_matrix_word, export_specification_word

logger = logging.getLogger(__name__)

EXPORT_FORMATS = [
    "exam-doc",
    "exam-docx",
    "exam-tex",
    "matrix-doc",
    "matrix-docx",
    "matrix-csv",
    "matrix-tex",
    "spec-doc",
    "spec-docx",
    "spec-csv",
    "spec-tex",
]

_EXTENSIONS = {"doc": DOC_MIMETYPE, "docx": DOCX_MIMETYPE, "tex": TEX_MIMETYPE, "csv": CSV_MIMETYPE}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    mimetype: str
    content: bytes


def _encode(value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value.getvalue()


def build_export(
    doc: ExamDocument,
    fmt: str,
    figures: Optional[FigureBoard] = None,
    renderer: Optional[MathRenderer] = None,
    figure_width: int = DEFAULT_FIGURE_WIDTH,
) -> ExportArtifact:
    """Render ``doc`` in export format ``fmt``.

    Raises:
        ValidationError: for an unknown format, or when the document has
            nothing to put in the requested artifact.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Unknown export format: {fmt}")
    kind, ext = fmt.split("-", 1)
    header = doc.header

    if kind == "exam":
        if not doc.questions:
            raise ValidationError("The exam has no questions to export.")
        filename = exam_filename(header, ext)
        if ext == "doc":
            content = export_exam_word(header, doc.questions, figures, renderer, figure_width)
        elif ext == "docx":
            content = export_exam_docx(header, doc.questions, figures)
        else:
            content = export_exam_latex(header, doc.questions)
    elif kind == "matrix":
        if not doc.matrix:
            raise ValidationError("The matrix is empty.")
        filename = matrix_filename(header, ext)
        if ext == "doc":
            content = export_matrix_word(doc.matrix, header)
        elif ext == "docx":
            content = export_matrix_docx(doc.matrix, header)
        elif ext == "csv":
            content = export_matrix_csv(doc.matrix)
        else:
            content = export_matrix_latex(doc.matrix, header)
    else:
        if not doc.specification:
            raise ValidationError("The specification is empty.")
        filename = specification_filename(header, ext)
        if ext == "doc":
            content = export_specification_word(doc.specification, header, renderer)
        elif ext == "docx":
            content = export_specification_docx(doc.specification, header)
        elif ext == "csv":
            content = export_specification_csv(doc.specification)
        else:
            content = export_specification_latex(doc.specification, header)

    logger.info("Exported %s as %s", fmt, filename)
    return ExportArtifact(filename=filename, mimetype=_EXTENSIONS[ext], content=_encode(content))
