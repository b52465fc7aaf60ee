"""
LaTeX source export.

Plain text is escaped for LaTeX while math fragments are written back with
their original ``$``/``$$`` delimiters, so the formulas typeset natively.
Figures cannot be expressed in the source and are marked by a comment line.
"""

import logging
from typing import List, Optional

from matrixquiz.mathtext import segment_math
from matrixquiz.questions import ExamHeader, section_points, split_sections
from matrixquiz.tables import MATRIX_TITLE, SPECIFICATION_TITLE, matrix_table, specification_table
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, format_points

logger = logging.getLogger(__name__)

FIGURE_PLACEHOLDER = "% [Figure: see the Word export for the drawing]"

_ESCAPES = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}

EXAM_PREAMBLE = r"""\documentclass[12pt]{article}
\usepackage[utf8]{inputenc}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{amsfonts}
\usepackage[a4paper, margin=2cm]{geometry}
\usepackage{graphicx}
"""

TABLE_PREAMBLE = r"""\documentclass[10pt]{article}
\usepackage[utf8]{inputenc}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage[a4paper, landscape, margin=1.5cm]{geometry}
\usepackage{longtable}
\usepackage{multirow}
"""


def escape_latex(text: Optional[str]) -> str:
    """Escape LaTeX special characters in plain text."""
    return "".join(_ESCAPES.get(ch, ch) for ch in (text or ""))


def latex_text(text: Optional[str]) -> str:
    """Escape the plain parts of ``text`` and keep math fragments verbatim."""
    return "".join(escape_latex(f.content) if not f.is_math else f.raw for f in segment_math(text))


def _question_lines(number: int, question) -> List[str]:
    lines = [rf"\noindent\textbf{{Question {number}:}} {latex_text(question.prompt)}"]
    if question.has_drawing:
        lines.append(FIGURE_PLACEHOLDER)
    lines.append(r"\vspace{0.5cm}")
    lines.append("")
    return lines


def export_exam_latex(header: ExamHeader, questions) -> str:
    """Export the exam and its answer key as a LaTeX article.

    Args:
        header: Exam header block.
        questions: List of Question in display order.

    Returns:
        LaTeX source text.
    """
    objective, essay = split_sections(questions)
    lines = [EXAM_PREAMBLE, r"\begin{document}", "", r"\begin{center}"]
    for value in (header.authority, header.school):
        if value:
            lines.append(rf"\textbf{{{escape_latex(value.upper())}}} \\")
    lines.append(rf"\textbf{{{escape_latex(header.title.upper())}}} \\")
    if header.school_year:
        lines.append(rf"School year: {escape_latex(header.school_year)} \\")
    lines.append(rf"Subject: {escape_latex(header.subject_line)} \\")
    lines.append(rf"Time: {escape_latex(header.duration_line)} \\")
    lines.append(rf"Exam code: {escape_latex(header.exam_code)}")
    lines += [r"\end{center}", ""]

    if objective:
        lines.append(
            rf"\section*{{PART I. OBJECTIVE QUESTIONS ({format_points(section_points(objective))} points)}}"
        )
        for i, q in enumerate(objective, start=1):
            lines += _question_lines(i, q)

    if essay:
        lines.append(rf"\section*{{PART II. ESSAY QUESTIONS ({format_points(section_points(essay))} points)}}")
        for i, q in enumerate(essay, start=len(objective) + 1):
            lines += _question_lines(i, q)

    lines += [r"\newpage", r"\begin{center}", r"\textbf{ANSWER KEY AND GRADING GUIDE}", r"\end{center}", ""]

    if objective:
        lines.append(r"\subsection*{I. OBJECTIVE QUESTIONS}")
        lines.append(r"\begin{tabular}{|c|" + "c|" * len(objective) + "}")
        lines.append(r"\hline")
        lines.append("Question & " + " & ".join(str(i) for i in range(1, len(objective) + 1)) + r" \\")
        lines.append(r"\hline")
        lines.append("Answer & " + " & ".join(latex_text(q.answer) for q in objective) + r" \\")
        lines.append(r"\hline")
        lines.append(r"\end{tabular}")
        lines.append("")

    if essay:
        lines.append(r"\subsection*{II. ESSAY QUESTIONS}")
        for i, q in enumerate(essay, start=len(objective) + 1):
            lines.append(rf"\noindent\textbf{{Question {i}:}} \\")
            lines.append(latex_text(q.rubric))
            if q.has_drawing:
                lines.append(FIGURE_PLACEHOLDER)
            lines.append(r"\\")
            lines.append(rf"\textbf{{Answer:}} {latex_text(q.answer)}")
            lines.append("")

    lines.append(r"\end{document}")
    return "\n".join(lines) + "\n"


def _grid_head(leading: List[str], trailing: List[str]) -> List[str]:
    n_levels = len(COGNITIVE_LEVELS)
    n_grid = len(QUESTION_TYPES) * n_levels
    first = [rf"\multirow{{3}}{{*}}{{{label}}}" for label in leading]
    first.append(rf"\multicolumn{{{n_grid}}}{{c|}}{{Assessment levels}}")
    first += [rf"\multirow{{3}}{{*}}{{{label}}}" for label in trailing]

    second = [""] * len(leading)
    second += [rf"\multicolumn{{{n_levels}}}{{c|}}{{{escape_latex(t)}}}" for t in QUESTION_TYPES]
    second += [""] * len(trailing)

    third = [""] * len(leading)
    third += [escape_latex(level) for _ in QUESTION_TYPES for level in COGNITIVE_LEVELS]
    third += [""] * len(trailing)

    grid_from = len(leading) + 1
    grid_to = len(leading) + n_grid
    return [
        r"\hline",
        " & ".join(first) + r" \\",
        rf"\cline{{{grid_from}-{grid_to}}}",
        " & ".join(second) + r" \\",
        rf"\cline{{{grid_from}-{grid_to}}}",
        " & ".join(third) + r" \\",
        r"\hline",
        r"\endhead",
    ]


def _column_spec(n_text: int, n_numeric: int) -> str:
    return "|" + "p{3cm}|" * n_text + "c|" * n_numeric


def _document(title: str, header: ExamHeader, body: List[str]) -> str:
    lines = [TABLE_PREAMBLE, r"\begin{document}", r"\begin{center}", rf"\textbf{{{title}}}"]
    if header.title:
        lines.append(rf"\\ {escape_latex(header.title)}")
    lines.append(r"\end{center}")
    lines += body
    lines.append(r"\end{document}")
    return "\n".join(lines) + "\n"


def export_matrix_latex(rows, header: Optional[ExamHeader] = None) -> str:
    """Export the matrix as a ``longtable``."""
    data = matrix_table(rows)
    n_grid = len(QUESTION_TYPES) * len(COGNITIVE_LEVELS)
    body = [r"\begin{longtable}{|c" + _column_spec(3, n_grid + 3) + "}"]
    body += _grid_head(["\\#", "Topic", "Knowledge unit", "Learning outcome"], ["Questions", "Points", "Percentage"])
    for r in data.rows:
        cells = [str(r.number), latex_text(r.topic), latex_text(r.knowledge_unit), latex_text(r.learning_outcome)]
        cells += [str(n) if n else "" for n in r.cells]
        cells += [str(r.questions), r.points_text, r.percentage_text]
        body.append(" & ".join(cells) + r" \\ \hline")
    footer = [r"\multicolumn{4}{|c|}{\textbf{Total}}"]
    footer += [str(n) for n in data.column_totals]
    footer += [str(data.total_questions), data.total_points_text, ""]
    body.append(" & ".join(footer) + r" \\ \hline")
    for label, points_text in data.level_point_rows:
        line = [rf"\multicolumn{{4}}{{|c|}}{{\textbf{{{escape_latex(label)}}}}}"]
        line += [""] * n_grid + ["", points_text, ""]
        body.append(" & ".join(line) + r" \\ \hline")
    body.append(r"\end{longtable}")
    return _document(MATRIX_TITLE, header or ExamHeader(), body)


def export_specification_latex(items, header: Optional[ExamHeader] = None) -> str:
    """Export the grouped specification; topic and unit cells use ``\\multirow``."""
    data = specification_table(items)
    n_grid = len(QUESTION_TYPES) * len(COGNITIVE_LEVELS)
    body = [r"\begin{longtable}{" + _column_spec(3, n_grid + 1) + "}"]
    body += _grid_head(["Topic", "Knowledge unit", "Learning outcome"], ["Total"])

    rows = data.rows
    for i, r in enumerate(rows):
        topic = rf"\multirow{{{r.topic_span}}}{{3cm}}{{{latex_text(r.topic)}}}" if r.starts_topic else ""
        unit = rf"\multirow{{{r.unit_span}}}{{3cm}}{{{latex_text(r.knowledge_unit)}}}" if r.starts_unit else ""
        cells = [topic, unit, latex_text(r.learning_outcome)]
        cells += [str(n) if n else "" for n in r.cell_values()]
        cells.append(str(r.total))

        # Rule under the row: full when the next row starts a topic, otherwise
        # skip the columns still covered by a running multirow.
        nxt = rows[i + 1] if i + 1 < len(rows) else None
        if nxt is None or nxt.starts_topic:
            rule = r"\hline"
        elif nxt.starts_unit:
            rule = rf"\cline{{2-{3 + n_grid + 1}}}"
        else:
            rule = rf"\cline{{3-{3 + n_grid + 1}}}"
        body.append(" & ".join(cells) + r" \\ " + rule)

    footer = [r"\multicolumn{3}{|c|}{\textbf{Total questions}}"]
    footer += [str(n) for n in data.column_totals] + [str(data.total_questions)]
    body.append(" & ".join(footer) + r" \\ \hline")
    body.append(r"\end{longtable}")
    return _document(SPECIFICATION_TITLE, header or ExamHeader(), body)
