"""
Flat specification items produced by the content-generation service.

One item per non-zero matrix cell, with the learning outcome attached per
item. Items are read-only; grouping and totals live in ``grouping`` and
``aggregation``.
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, List

from matrixquiz.taxonomy import require_mapping, resolve_level, resolve_question_type, text_value

# Accepted spellings for each field, in lookup order.
FIELD_KEYS = {
    "topic": ("topic", "chuDe"),
    "knowledge_unit": ("knowledge_unit", "knowledgeUnit", "unit", "noiDung"),
    "learning_outcome": ("learning_outcome", "learningOutcome", "outcome", "yeuCauCanDat"),
    "question_type": ("question_type", "questionType", "type", "loaiCauHoi"),
    "cognitive_level": ("cognitive_level", "cognitiveLevel", "level", "mucDo"),
    "quantity": ("quantity", "count", "soLuong"),
}

_WHITESPACE = re.compile(r"\s+")


def _pick(data: Dict[str, Any], field_name: str, default=None):
    for key in FIELD_KEYS[field_name]:
        if key in data and data[key] is not None:
            return data[key]
    return default


def clean_text(text) -> str:
    """NFC-normalize, collapse whitespace runs, and strip."""
    if text is None:
        return ""
    text = unicodedata.normalize("NFC", str(text))
    return _WHITESPACE.sub(" ", text).strip()


def outcome_key(text) -> str:
    """Grouping key for a learning outcome.

    Two spellings of the same outcome that differ only in case, spacing,
    Unicode composition, or a trailing period share a key.
    """
    return clean_text(text).rstrip(". ").casefold()


@dataclass(frozen=True)
class SpecificationItem:
    topic: str
    knowledge_unit: str
    learning_outcome: str
    question_type: str
    cognitive_level: str
    quantity: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpecificationItem":
        """Normalize one collaborator record.

        Raises:
            ValueError: for a record that is not an object, a text field that
                is not text, or an unknown question type or cognitive level.
        """
        require_mapping(data, "A specification item")
        try:
            quantity = max(0, int(_pick(data, "quantity", 0)))
        except (TypeError, ValueError):
            quantity = 0
        return cls(
            topic=clean_text(text_value(_pick(data, "topic", ""), "topic")),
            knowledge_unit=clean_text(text_value(_pick(data, "knowledge_unit", ""), "knowledge_unit")),
            learning_outcome=clean_text(text_value(_pick(data, "learning_outcome", ""), "learning_outcome")),
            question_type=resolve_question_type(_pick(data, "question_type", "")),
            cognitive_level=resolve_level(_pick(data, "cognitive_level", "")),
            quantity=quantity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "knowledge_unit": self.knowledge_unit,
            "learning_outcome": self.learning_outcome,
            "question_type": self.question_type,
            "cognitive_level": self.cognitive_level,
            "quantity": self.quantity,
        }


def parse_specification(records: List[Dict[str, Any]]) -> List[SpecificationItem]:
    return [SpecificationItem.from_dict(r) for r in records]
