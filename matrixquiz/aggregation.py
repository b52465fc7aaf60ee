"""
Totals over a matrix or a flat specification list.

All sums accumulate unrounded values; round with ``taxonomy.round2`` only
when a number is displayed or exported.
"""

from typing import Dict, Iterable, List

from matrixquiz.matrix import MatrixRow
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPE_POINTS, QUESTION_TYPES, empty_counts

Totals = Dict[str, Dict[str, int]]


def column_totals(rows: Iterable[MatrixRow]) -> Totals:
    """Per (type, level) sum of counts across all rows; all zero for no rows."""
    totals = empty_counts()
    for row in rows:
        for q_type in QUESTION_TYPES:
            for level in COGNITIVE_LEVELS:
                totals[q_type][level] += row.counts[q_type][level]
    return totals


def specification_column_totals(items) -> Totals:
    """Per (type, level) sum of ``quantity`` across specification items."""
    totals = empty_counts()
    for item in items:
        totals[item.question_type][item.cognitive_level] += item.quantity
    return totals


def points_by_level(totals: Totals) -> Dict[str, float]:
    """Exam points allocated to each cognitive level, independent of topic."""
    return {
        level: sum(totals[q_type][level] * QUESTION_TYPE_POINTS[q_type] for q_type in QUESTION_TYPES)
        for level in COGNITIVE_LEVELS
    }


def points_by_type(totals: Totals) -> Dict[str, float]:
    return {
        q_type: sum(totals[q_type][level] for level in COGNITIVE_LEVELS) * QUESTION_TYPE_POINTS[q_type]
        for q_type in QUESTION_TYPES
    }


def grand_total_points(totals: Totals) -> float:
    return sum(points_by_level(totals).values())


def total_questions(totals: Totals) -> int:
    return sum(totals[q_type][level] for q_type in QUESTION_TYPES for level in COGNITIVE_LEVELS)


def is_submittable(rows: List[MatrixRow]) -> bool:
    """True when the matrix may be sent for content generation.

    Requires at least one row and at least one question across all cells.
    This is the only place the rule lives.
    """
    return len(rows) > 0 and total_questions(column_totals(rows)) > 0


def matrix_summary(rows: List[MatrixRow]) -> dict:
    """Everything the matrix footer shows, as a JSON-ready dict."""
    totals = column_totals(rows)
    by_level = points_by_level(totals)
    return {
        "column_totals": totals,
        "points_by_level": by_level,
        "grand_total_points": sum(by_level.values()),
        "total_questions": total_questions(totals),
        "submittable": is_submittable(rows),
    }
