"""
Assessment matrix model.

A matrix is a list of ``MatrixRow`` values, one per (topic, knowledge unit)
pair. Rows are immutable: every edit returns a new list in which only the
edited row has been replaced, and the replacement owns a deep copy of its
counts so no earlier snapshot can be changed through it.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from matrixquiz.taxonomy import (
    COGNITIVE_LEVELS,
    QUESTION_TYPE_POINTS,
    QUESTION_TYPES,
    empty_counts,
    resolve_level,
    require_mapping,
    resolve_question_type,
    round2,
    text_value,
)

logger = logging.getLogger(__name__)

Counts = Dict[str, Dict[str, int]]


def _new_row_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MatrixRow:
    """One (topic, knowledge unit) row of the matrix.

    Build rows with :func:`make_row` or the edit functions below so that
    ``percentage`` always agrees with ``counts``.
    """

    topic: str
    knowledge_unit: str
    learning_outcome: str = ""
    counts: Counts = field(default_factory=empty_counts)
    percentage: float = 0.0
    id: str = field(default_factory=_new_row_id)

    def cell(self, question_type, level) -> int:
        return self.counts[resolve_question_type(question_type)][resolve_level(level)]

    @property
    def points(self) -> float:
        return row_points(self.counts)

    @property
    def question_count(self) -> int:
        return row_question_count(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "topic": self.topic,
            "knowledge_unit": self.knowledge_unit,
            "learning_outcome": self.learning_outcome,
            "counts": copy.deepcopy(self.counts),
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MatrixRow":
        """Build a row from a serialized dict.

        Accepts ``knowledge_unit`` or ``knowledgeUnit`` (and the same for the
        outcome). Any stored ``percentage`` is ignored and recomputed; missing
        cells default to zero and negative ones clamp to zero.

        Raises:
            ValueError: if the record, its counts or a level entry is not an
                object, a text field is not text, or a type or level is
                unknown.
        """
        require_mapping(data, "A matrix row")
        counts = empty_counts()
        for raw_type, levels in require_mapping(data.get("counts") or {}, "'counts'").items():
            q_type = resolve_question_type(raw_type)
            for raw_level, value in require_mapping(levels or {}, f"'counts' for {q_type}").items():
                counts[q_type][resolve_level(raw_level)] = _to_count(value)
        return make_row(
            topic=text_value(data.get("topic"), "topic"),
            knowledge_unit=text_value(data.get("knowledge_unit", data.get("knowledgeUnit")), "knowledge_unit"),
            learning_outcome=text_value(
                data.get("learning_outcome", data.get("learningOutcome")), "learning_outcome"
            ),
            counts=counts,
            row_id=text_value(data.get("id"), "id") or None,
        )


def _to_count(value) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def row_points(counts: Counts) -> float:
    """Sum of ``count * weight(type)`` over every cell, unrounded."""
    total = 0.0
    for q_type in QUESTION_TYPES:
        type_count = sum(counts[q_type][level] for level in COGNITIVE_LEVELS)
        total += type_count * QUESTION_TYPE_POINTS[q_type]
    return total


def row_percentage(counts: Counts) -> float:
    """Row share of a 10-point exam expressed as a percentage."""
    return round2(row_points(counts) * 10)


def row_question_count(row: MatrixRow) -> int:
    return sum(row.counts[q_type][level] for q_type in QUESTION_TYPES for level in COGNITIVE_LEVELS)


def make_row(
    topic: str,
    knowledge_unit: str,
    learning_outcome: str = "",
    counts: Optional[Counts] = None,
    row_id: Optional[str] = None,
) -> MatrixRow:
    """Create a row with a private copy of ``counts`` and a derived percentage."""
    own_counts = copy.deepcopy(counts) if counts is not None else empty_counts()
    return MatrixRow(
        topic=topic.strip(),
        knowledge_unit=knowledge_unit.strip(),
        learning_outcome=learning_outcome or "",
        counts=own_counts,
        percentage=row_percentage(own_counts),
        id=row_id or _new_row_id(),
    )


def _with_counts(row: MatrixRow, counts: Counts, **changes) -> MatrixRow:
    return replace(row, counts=counts, percentage=row_percentage(counts), **changes)


def find_row(rows: List[MatrixRow], topic: str, knowledge_unit: str) -> Optional[MatrixRow]:
    for row in rows:
        if row.topic.strip() == topic.strip() and row.knowledge_unit.strip() == knowledge_unit.strip():
            return row
    return None


def add_contribution(
    rows: List[MatrixRow],
    topic: str,
    knowledge_unit: str,
    learning_outcome: str,
    question_type: str,
    level: str,
    count: int,
) -> List[MatrixRow]:
    """Add ``count`` questions of one (type, level) to the (topic, unit) row.

    Merges into the existing row for the pair when there is one (summing into
    the cell and filling the outcome only if it is still empty), otherwise
    appends a new row. Topic and unit are matched and stored without
    surrounding whitespace. An empty topic or unit, or a count below 1,
    leaves the matrix unchanged.

    Returns:
        A new row list; rows other than the affected one are the same objects.
    """
    topic = (topic or "").strip()
    knowledge_unit = (knowledge_unit or "").strip()
    if not topic or not knowledge_unit:
        logger.debug("add_contribution: rejected empty topic/unit")
        return rows
    if count is None or count < 1:
        logger.debug("add_contribution: rejected count %r", count)
        return rows

    q_type = resolve_question_type(question_type)
    lvl = resolve_level(level)

    existing = find_row(rows, topic, knowledge_unit)
    if existing is None:
        counts = empty_counts()
        counts[q_type][lvl] = int(count)
        return list(rows) + [make_row(topic, knowledge_unit, learning_outcome, counts)]

    counts = copy.deepcopy(existing.counts)
    counts[q_type][lvl] += int(count)
    changes = {}
    if not existing.learning_outcome and learning_outcome:
        changes["learning_outcome"] = learning_outcome
    updated = _with_counts(existing, counts, **changes)
    return [updated if row.id == existing.id else row for row in rows]


def set_cell(rows: List[MatrixRow], row_id: str, question_type: str, level: str, value: int) -> List[MatrixRow]:
    """Overwrite one cell with ``max(0, value)``; unknown ``row_id`` is a no-op."""
    q_type = resolve_question_type(question_type)
    lvl = resolve_level(level)
    result = []
    for row in rows:
        if row.id == row_id:
            counts = copy.deepcopy(row.counts)
            counts[q_type][lvl] = _to_count(value)
            row = _with_counts(row, counts)
        result.append(row)
    return result


def remove_row(rows: List[MatrixRow], row_id: str) -> List[MatrixRow]:
    return [row for row in rows if row.id != row_id]


def non_empty_rows(rows: List[MatrixRow]) -> List[MatrixRow]:
    """Rows worth sending to the generation service.

    Drops rows with a blank topic or unit and rows whose cells are all zero.
    """
    return [
        row
        for row in rows
        if row.topic.strip() and row.knowledge_unit.strip() and row_question_count(row) > 0
    ]
