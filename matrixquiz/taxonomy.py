"""
Question type and cognitive level constants for the assessment matrix.

Defines the fixed 4 x 3 grid every matrix row and specification item is
keyed by, the point weight carried by each question type, and helpers for
resolving user- or collaborator-supplied names to the canonical labels.
"""

from decimal import ROUND_HALF_UP, Decimal

QUESTION_TYPE_DEFS = [
    {"key": "multiple_choice", "label": "Multiple choice", "points": 0.25, "section": "objective"},
    {"key": "true_false", "label": "True/False", "points": 1.0, "section": "objective"},
    {"key": "short_answer", "label": "Short answer", "points": 0.5, "section": "objective"},
    {"key": "essay", "label": "Essay", "points": 2.0, "section": "essay"},
]

COGNITIVE_LEVEL_DEFS = [
    {"number": 1, "name": "Recall", "description": "Recognize and restate facts, terms, procedures"},
    {"number": 2, "name": "Understand", "description": "Explain, compare, and interpret ideas"},
    {"number": 3, "name": "Apply", "description": "Use knowledge to solve problems in new situations"},
]

QUESTION_TYPES = [t["label"] for t in QUESTION_TYPE_DEFS]
COGNITIVE_LEVELS = [lvl["name"] for lvl in COGNITIVE_LEVEL_DEFS]
QUESTION_TYPE_POINTS = {t["label"]: t["points"] for t in QUESTION_TYPE_DEFS}

ESSAY_TYPE = "Essay"
SECTION_OBJECTIVE = "objective"
SECTION_ESSAY = "essay"

# Type names the content-generation collaborator has been seen to emit.
TYPE_ALIASES = {
    "mc": "Multiple choice",
    "mcq": "Multiple choice",
    "multiple choice": "Multiple choice",
    "nhiều lựa chọn": "Multiple choice",
    "tf": "True/False",
    "true-false": "True/False",
    "true false": "True/False",
    "đúng - sai": "True/False",
    "đúng sai": "True/False",
    "short": "Short answer",
    "trả lời ngắn": "Short answer",
    "open": "Essay",
    "open response": "Essay",
    "tự luận": "Essay",
}

LEVEL_ALIASES = {
    "remember": "Recall",
    "know": "Recall",
    "knowledge": "Recall",
    "biết": "Recall",
    "nhận biết": "Recall",
    "comprehend": "Understand",
    "hiểu": "Understand",
    "thông hiểu": "Understand",
    "application": "Apply",
    "vận dụng": "Apply",
}


def resolve_question_type(name):
    """Return the canonical question type label for ``name``.

    Accepts the label, the snake_case key, or a known alias, compared
    case-insensitively.

    Raises:
        ValueError: if the name does not match any question type.
    """
    if not isinstance(name, str):
        raise ValueError(f"Invalid question type: {name!r}")
    needle = name.strip().casefold()
    for t in QUESTION_TYPE_DEFS:
        if needle in (t["label"].casefold(), t["key"]):
            return t["label"]
    if needle in TYPE_ALIASES:
        return TYPE_ALIASES[needle]
    raise ValueError(f"Unknown question type: {name!r}")


def resolve_level(name):
    """Return the canonical cognitive level name for ``name``.

    Raises:
        ValueError: if the name does not match any cognitive level.
    """
    if isinstance(name, int) and not isinstance(name, bool):
        for lvl in COGNITIVE_LEVEL_DEFS:
            if lvl["number"] == name:
                return lvl["name"]
        raise ValueError(f"Invalid level number {name}")
    if not isinstance(name, str):
        raise ValueError(f"Invalid cognitive level: {name!r}")
    needle = name.strip().casefold()
    for lvl in COGNITIVE_LEVEL_DEFS:
        if needle == lvl["name"].casefold():
            return lvl["name"]
    if needle in LEVEL_ALIASES:
        return LEVEL_ALIASES[needle]
    raise ValueError(f"Unknown cognitive level: {name!r}")


def weight(question_type):
    """Point weight of a single question of ``question_type``."""
    return QUESTION_TYPE_POINTS[resolve_question_type(question_type)]


def section_of(question_type):
    """Return ``"essay"`` or ``"objective"`` for a question type."""
    label = resolve_question_type(question_type)
    for t in QUESTION_TYPE_DEFS:
        if t["label"] == label:
            return t["section"]
    return SECTION_OBJECTIVE


def cells():
    """All (type, level) pairs in column order: type-major, level-minor."""
    return [(q_type, level) for q_type in QUESTION_TYPES for level in COGNITIVE_LEVELS]


def empty_counts():
    """A fresh, fully-populated counts mapping with every cell at zero."""
    return {q_type: {level: 0 for level in COGNITIVE_LEVELS} for q_type in QUESTION_TYPES}


def round2(value):
    """Round to 2 decimal places, half away from zero.

    Goes through ``Decimal(str(value))`` so that values such as 2.675 round
    the way they read rather than the way they are stored in binary.
    """
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_points(value):
    """Format a point value for display: ``6.0`` -> ``"6.00"``."""
    return f"{round2(value):.2f}"


def require_mapping(value, what):
    """Raise ValueError unless ``value`` is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, not {type(value).__name__}.")
    return value


def text_value(value, name):
    """A text field from an incoming record.

    ``None`` becomes ``""`` and numbers are written out; lists and objects
    are rejected with ValueError.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    raise ValueError(f"'{name}' must be text, not {type(value).__name__}.")
