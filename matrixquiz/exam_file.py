"""
Reading and writing exam documents on disk.

An exam file is YAML or JSON (chosen by extension) with four top-level keys:
``header``, ``matrix``, ``specification`` and ``questions``. Every key is
optional; the CLI fills in what is missing as the workflow progresses.
"""

import json
import logging
import os

import yaml

from matrixquiz.errors import ValidationError
from matrixquiz.matrix import MatrixRow
from matrixquiz.questions import ExamDocument, ExamHeader, parse_questions
from matrixquiz.specification import parse_specification

logger = logging.getLogger(__name__)


def _is_json(path):
    return os.path.splitext(path)[1].lower() == ".json"


def document_from_dict(data, header_defaults=None) -> ExamDocument:
    """Build an ExamDocument from plain data.

    Raises:
        ValidationError: if a section has the wrong shape or names an
            unknown question type or level.
    """
    if not isinstance(data, dict):
        raise ValidationError("An exam document must be a mapping.")
    for key in ("matrix", "specification", "questions"):
        if not isinstance(data.get(key) or [], list):
            raise ValidationError(f"'{key}' must be a list.")
    try:
        return ExamDocument(
            header=ExamHeader.from_dict(data.get("header"), header_defaults),
            matrix=[MatrixRow.from_dict(r) for r in data.get("matrix") or []],
            specification=parse_specification(data.get("specification") or []),
            questions=parse_questions(data.get("questions") or []),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def document_to_dict(doc: ExamDocument) -> dict:
    return {
        "header": doc.header.to_dict(),
        "matrix": [r.to_dict() for r in doc.matrix],
        "specification": [i.to_dict() for i in doc.specification],
        "questions": [q.to_dict() for q in doc.questions],
    }


def load_exam(path, header_defaults=None) -> ExamDocument:
    """Load an exam document from a YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) if _is_json(path) else yaml.safe_load(f)
    logger.debug("Loaded exam document from %s", path)
    return document_from_dict(data or {}, header_defaults)


def save_exam(doc: ExamDocument, path):
    """Write an exam document back in the format its extension names."""
    data = document_to_dict(doc)
    with open(path, "w", encoding="utf-8") as f:
        if _is_json(path):
            json.dump(data, f, ensure_ascii=False, indent=2)
        else:
            yaml.safe_dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
    logger.debug("Saved exam document to %s", path)
