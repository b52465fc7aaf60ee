"""
Table layouts shared by every document renderer.

Each renderer (Word markup, docx, LaTeX, CSV) walks the same
``MatrixTable`` / ``SpecificationTable`` instead of re-deriving rows and
totals, so all formats agree on row order, cell values, and totals.
"""

from dataclasses import dataclass
from typing import List, Tuple

from matrixquiz.aggregation import (
    column_totals,
    grand_total_points,
    points_by_level,
    specification_column_totals,
    total_questions,
)
from matrixquiz.grouping import SpecificationRow, group_specification
from matrixquiz.matrix import MatrixRow, row_points, row_question_count
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES, cells, format_points

MATRIX_TITLE = "ASSESSMENT MATRIX"
SPECIFICATION_TITLE = "DETAILED SPECIFICATION"


def column_headers() -> List[str]:
    """Flat ``"<type> - <level>"`` labels in column order (CSV header style)."""
    return [f"{q_type} - {level}" for q_type, level in cells()]


def _flatten(totals) -> List[int]:
    return [totals[q_type][level] for q_type in QUESTION_TYPES for level in COGNITIVE_LEVELS]


@dataclass(frozen=True)
class MatrixTableRow:
    number: int
    topic: str
    knowledge_unit: str
    learning_outcome: str
    cells: List[int]
    questions: int
    points: float
    percentage: float

    @property
    def points_text(self) -> str:
        return format_points(self.points) if self.points > 0 else ""

    @property
    def percentage_text(self) -> str:
        return f"{self.percentage:.2f}" if self.percentage > 0 else ""


@dataclass(frozen=True)
class MatrixTable:
    rows: List[MatrixTableRow]
    column_totals: List[int]
    points_by_level: dict
    total_questions: int
    total_points: float

    @property
    def total_points_text(self) -> str:
        return format_points(self.total_points)

    @property
    def level_point_rows(self) -> List[Tuple[str, str]]:
        """Footer lines below the totals: ``("Points (<level>)", "<points>")`` per level."""
        return [(f"Points ({level})", format_points(points)) for level, points in self.points_by_level.items()]


def matrix_table(rows: List[MatrixRow]) -> MatrixTable:
    table_rows = [
        MatrixTableRow(
            number=i + 1,
            topic=row.topic,
            knowledge_unit=row.knowledge_unit,
            learning_outcome=row.learning_outcome,
            cells=_flatten(row.counts),
            questions=row_question_count(row),
            points=row_points(row.counts),
            percentage=row.percentage,
        )
        for i, row in enumerate(rows)
    ]
    totals = column_totals(rows)
    return MatrixTable(
        rows=table_rows,
        column_totals=_flatten(totals),
        points_by_level=points_by_level(totals),
        total_questions=total_questions(totals),
        total_points=grand_total_points(totals),
    )


@dataclass(frozen=True)
class SpecificationTable:
    rows: List[SpecificationRow]
    column_totals: List[int]
    total_questions: int


def specification_table(items) -> SpecificationTable:
    grouped = group_specification(items)
    totals = specification_column_totals(items)
    return SpecificationTable(
        rows=grouped.leaf_rows(),
        column_totals=_flatten(totals),
        total_questions=total_questions(totals),
    )
