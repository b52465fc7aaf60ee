"""
Content generation API blueprint.

Each request blocks until the service answers; failures leave the client's
state untouched and come back as a JSON error.
"""

import asyncio
import logging
import mimetypes
import os
import tempfile

from flask import Blueprint, jsonify, request

from matrixquiz.errors import GenerationError, ValidationError
from matrixquiz.generation import (
    SIMILAR_SOURCE_MIME_TYPES,
    generate_questions,
    generate_similar_questions,
    generate_specification,
)
from matrixquiz.questions import Question
from matrixquiz.web.blueprints.helpers import (
    error_response,
    generation_error_response,
    get_figure_board,
    get_llm_provider,
    get_regenerator,
    json_body,
    parse_document,
)

logger = logging.getLogger(__name__)

generation_bp = Blueprint("generation", __name__)


@generation_bp.route("/api/generate/specification", methods=["POST"])
def specification():
    """Generate specification items from ``{"header": ..., "matrix": [...]}``."""
    try:
        doc = parse_document(json_body())
        items = generate_specification(get_llm_provider(), doc.matrix, doc.header.grade, doc.header.subject)
    except ValidationError as e:
        return error_response(str(e))
    except GenerationError as e:
        return generation_error_response(e)
    return jsonify({"ok": True, "specification": [i.to_dict() for i in items]})


@generation_bp.route("/api/generate/questions", methods=["POST"])
def questions():
    """Generate questions from ``{"header": ..., "specification": [...]}``."""
    try:
        doc = parse_document(json_body())
        generated = generate_questions(get_llm_provider(), doc.specification, doc.header.grade, doc.header.subject)
    except ValidationError as e:
        return error_response(str(e))
    except GenerationError as e:
        return generation_error_response(e)
    return jsonify({"ok": True, "questions": [q.to_dict() for q in generated]})


@generation_bp.route("/api/questions/regenerate", methods=["POST"])
def regenerate():
    """Replace one question. Answers 409 while the same question is in flight."""
    data = json_body()
    if not isinstance(data.get("question"), dict):
        return error_response("'question' is required.")
    try:
        doc = parse_document({"header": data.get("header")})
        question = Question.from_dict(data["question"])
        regenerator = get_regenerator()
        fresh = asyncio.run(
            regenerator.regenerate(question, data.get("notes"), doc.header.grade, doc.header.subject)
        )
    except (ValidationError, ValueError) as e:
        return error_response(str(e))
    except GenerationError as e:
        return generation_error_response(e)

    if fresh is None:
        return error_response("This question is already being regenerated.", 409)
    get_figure_board().forget(fresh.id)
    return jsonify({"ok": True, "question": fresh.to_dict()})


@generation_bp.route("/api/generate/similar", methods=["POST"])
def similar():
    """Generate exercises similar to those in an uploaded file.

    Accepts multipart form data with a ``file`` field (PDF, JPEG, PNG, WebP
    or .docx) and optional ``title``, ``grade`` and ``subject`` fields.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return error_response("No file provided")
    mime_type = file.mimetype
    if mime_type not in SIMILAR_SOURCE_MIME_TYPES:
        return error_response("Unsupported file type. Use a PDF, an image (JPEG, PNG, WebP) or a Word (.docx) file.")

    fields = {k: request.form.get(k) for k in ("title", "grade", "subject") if request.form.get(k)}
    fields.setdefault("title", "Similar Exercises")
    fd, path = tempfile.mkstemp(suffix=mimetypes.guess_extension(mime_type) or "")
    os.close(fd)
    try:
        file.save(path)
        doc = parse_document({"header": fields})
        generated = generate_similar_questions(
            get_llm_provider(), path, doc.header.grade, doc.header.subject, mime_type=mime_type
        )
    except ValidationError as e:
        return error_response(str(e))
    except GenerationError as e:
        return generation_error_response(e)
    finally:
        os.remove(path)
    return jsonify({"ok": True, "header": doc.header.to_dict(), "questions": [q.to_dict() for q in generated]})
