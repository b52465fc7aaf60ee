"""
Question and exam header records consumed by the exam renderers.

Handles the different data shapes the content-generation service returns:
English field names, camelCase, or Vietnamese keys.
"""

import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from matrixquiz.taxonomy import (
    QUESTION_TYPES,
    SECTION_ESSAY,
    require_mapping,
    resolve_level,
    resolve_question_type,
    section_of,
    text_value,
    weight,
)

QUESTION_KEYS = {
    "id": ("id", "question_id"),
    "question_type": ("question_type", "questionType", "type", "loaiCauHoi"),
    "prompt": ("prompt", "text", "question", "stem", "cauHoi"),
    "drawing": ("drawing", "drawing_code", "drawingCode", "figure"),
    "answer": ("answer", "correct_answer", "dapAn"),
    "rubric": ("rubric", "grading_guide", "rubric_hint", "huongDanChamDiem"),
    "topic": ("topic", "chuDe"),
    "cognitive_level": ("cognitive_level", "cognitiveLevel", "level", "mucDo"),
}


def _pick(data, name, default=None):
    for key in QUESTION_KEYS[name]:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


@dataclass(frozen=True)
class Question:
    id: str
    question_type: str
    prompt: str
    answer: str = ""
    rubric: str = ""
    drawing: str = ""
    topic: str = ""
    cognitive_level: str = ""

    @property
    def is_essay(self) -> bool:
        return section_of(self.question_type) == SECTION_ESSAY

    @property
    def points(self) -> float:
        return weight(self.question_type)

    @property
    def has_drawing(self) -> bool:
        return bool(self.drawing and self.drawing.strip())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Normalize a raw question record.

        A missing type defaults to multiple choice; a missing id gets a
        fresh one. Unknown levels are dropped rather than rejected since
        the level is informational on a question.

        Raises:
            ValueError: if the record is not an object, a text field is not
                text, or the question type is unknown.
        """
        require_mapping(data, "A question")
        raw_level = _pick(data, "cognitive_level", "")
        try:
            level = resolve_level(raw_level) if raw_level else ""
        except ValueError:
            level = ""
        return cls(
            id=text_value(_pick(data, "id"), "id") or uuid.uuid4().hex,
            question_type=resolve_question_type(_pick(data, "question_type", QUESTION_TYPES[0])),
            prompt=text_value(_pick(data, "prompt", ""), "prompt"),
            answer=text_value(_pick(data, "answer", ""), "answer"),
            rubric=text_value(_pick(data, "rubric", ""), "rubric"),
            drawing=text_value(_pick(data, "drawing", ""), "drawing"),
            topic=text_value(_pick(data, "topic", ""), "topic"),
            cognitive_level=level,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replaced_by(self, other: "Question") -> "Question":
        """Take ``other``'s content while keeping this question's id."""
        return replace(other, id=self.id)


def parse_questions(records: List[Dict[str, Any]]) -> List[Question]:
    return [Question.from_dict(r) for r in records]


def split_sections(questions: List[Question]) -> Tuple[List[Question], List[Question]]:
    """Return ``(objective, essay)`` keeping the original order in each."""
    objective = [q for q in questions if not q.is_essay]
    essay = [q for q in questions if q.is_essay]
    return objective, essay


def section_points(questions: List[Question]) -> float:
    return sum(q.points for q in questions)


@dataclass(frozen=True)
class ExamHeader:
    authority: str = ""
    school: str = ""
    title: str = "Midterm Exam"
    subject: str = "Mathematics"
    grade: str = ""
    duration: str = "90"
    exam_code: str = "1"
    school_year: str = ""

    @property
    def subject_line(self) -> str:
        return f"{self.subject} {self.grade}".strip()

    @property
    def duration_line(self) -> str:
        return f"{self.duration} minutes" if self.duration else ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], defaults: Optional[Dict[str, Any]] = None) -> "ExamHeader":
        """Build a header from ``data`` layered over config ``defaults``.

        Raises:
            ValueError: if ``data`` is not an object or a field is not text.
        """
        merged: Dict[str, Any] = {}
        merged.update(defaults or {})
        merged.update({k: v for k, v in require_mapping(data or {}, "The exam header").items() if v is not None})
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: text_value(v, k) for k, v in merged.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExamDocument:
    """Everything the exporters need for one exam."""

    header: ExamHeader = field(default_factory=ExamHeader)
    matrix: list = field(default_factory=list)
    specification: list = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
