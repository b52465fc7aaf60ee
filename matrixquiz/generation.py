"""
Client side of the content-generation service.

Builds the outbound payloads (matrix -> specification, specification ->
questions), sends them through an ``LLMProvider`` and normalizes what comes
back. Any failure surfaces as a ``GenerationError`` whose ``kind`` tells the
caller whether the API credential needs to be re-entered.
"""

import asyncio
import json
import logging
import mimetypes
from typing import Any, List, Optional

import docx

from matrixquiz.aggregation import is_submittable
from matrixquiz.errors import GenerationError, ValidationError, classify_error
from matrixquiz.matrix import MatrixRow, non_empty_rows
from matrixquiz.questions import Question, parse_questions
from matrixquiz.specification import SpecificationItem, parse_specification
from matrixquiz.taxonomy import COGNITIVE_LEVELS, QUESTION_TYPES

logger = logging.getLogger(__name__)

SPECIFICATION_PROMPT = """SPECIFICATION
You are an experienced {subject} teacher preparing a grade {grade} exam.
For every matrix row below, write the learning outcome each question must
assess and split the row's question counts into specification items.

Question types: {types}
Cognitive levels: {levels}

Return a JSON array. Each element has the fields "topic", "knowledge_unit",
"learning_outcome", "question_type", "cognitive_level" and "quantity".
Keep topic and knowledge_unit exactly as given. The quantities for a row
must add up to the row's counts. Write math as $...$ or $$...$$ LaTeX.
Return ONLY the JSON array, no markdown.

<payload>{payload}</payload>
"""

QUESTIONS_PROMPT = """QUESTIONS
You are an experienced {subject} teacher writing a grade {grade} exam.
Write exactly "quantity" questions for every specification item below,
matching its question type and cognitive level.

Return a JSON array. Each element has the fields "question_type", "topic",
"cognitive_level", "prompt", "answer" and, for Essay questions, "rubric"
(step-by-step grading guide with points). When a figure helps, add
"drawing": a figure program for a 500x300 canvas using only the commands
stroke, fill, width, font, line, polyline, polygon, rect, circle, ellipse,
arc, point and text, one per line. Multiple choice prompts list the options
A-D inside the prompt; the answer is the option letter. Write math as
$...$ or $$...$$ LaTeX.
Return ONLY the JSON array, no markdown.

<payload>{payload}</payload>
"""

REGENERATE_PROMPT = """REGENERATE
You are an experienced {subject} teacher writing a grade {grade} exam.
Write ONE new question to replace the question below. Keep the same
question type, topic and cognitive level but change the content.
{notes}
Return a JSON object with the fields "question_type", "topic",
"cognitive_level", "prompt", "answer", "rubric" (Essay only) and
optionally "drawing". Return ONLY the JSON object, no markdown.

<payload>{payload}</payload>
"""

SIMILAR_PROMPT = """SIMILAR
You are an experienced {subject} teacher writing a grade {grade} exam.
The attached source contains math exercises. Write a new set of exercises
that are similar in topic, difficulty and type but use different numbers
and wording. Keep the order of the source.

Return a JSON array. Each element has the fields "question_type" (one of
{types}), "topic", "prompt", "answer", "rubric" (Essay only) and optionally
"drawing" (a figure program for a 500x300 canvas). Write math as $...$ or
$$...$$ LaTeX. Return ONLY the JSON array, no markdown.

<payload>{payload}</payload>
"""

MEDIA_MIME_TYPES = ["application/pdf", "image/jpeg", "image/png", "image/webp"]
WORD_MIME_TYPES = ["application/vnd.openxmlformats-officedocument.wordprocessingml.document"]
SIMILAR_SOURCE_MIME_TYPES = MEDIA_MIME_TYPES + WORD_MIME_TYPES

mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type(WORD_MIME_TYPES[0], ".docx")


def build_matrix_payload(rows: List[MatrixRow], grade: str = "", subject: str = "") -> dict:
    """Outbound payload for specification generation.

    Only rows with a topic, a unit and at least one question are sent.

    Raises:
        ValidationError: if the matrix is not submittable.
    """
    if not is_submittable(rows):
        raise ValidationError("The matrix has no questions to generate from.")
    return {
        "grade": grade,
        "subject": subject,
        "matrix": [
            {
                "topic": row.topic,
                "knowledge_unit": row.knowledge_unit,
                "learning_outcome": row.learning_outcome,
                "counts": {
                    q_type: {level: n for level, n in levels.items() if n > 0}
                    for q_type, levels in row.counts.items()
                    if any(levels.values())
                },
            }
            for row in non_empty_rows(rows)
        ],
    }


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned.strip()


def parse_json_response(text: str, expect=list) -> Any:
    """Parse a generation response, tolerating markdown fences.

    A single object is accepted where a list is expected (and vice versa,
    the first element of a non-empty list where an object is expected).

    Raises:
        GenerationError: if the response is not JSON of the expected shape.
    """
    try:
        parsed = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error("Generation response is not valid JSON: %s", e)
        raise GenerationError(f"The generation service returned invalid JSON: {e}") from e

    if expect is list and isinstance(parsed, dict):
        parsed = [parsed]
    elif expect is dict and isinstance(parsed, list):
        parsed = parsed[0] if parsed else None
    if not isinstance(parsed, expect):
        raise GenerationError(f"The generation service returned an unexpected response ({type(parsed).__name__}).")
    return parsed


def _call(provider, prompt: str, source_path: Optional[str] = None) -> str:
    try:
        parts = [prompt]
        if source_path:
            parts.append(provider.prepare_image_context(source_path))
        return provider.generate(parts, json_mode=True)
    except GenerationError:
        raise
    except Exception as e:
        kind = classify_error(e)
        logger.error("Generation call failed (%s): %s", kind, e)
        raise GenerationError(str(e), kind=kind) from e


def _prompt(template: str, payload: dict, grade: str, subject: str, **extra) -> str:
    return template.format(
        grade=grade or "",
        subject=subject or "",
        types=", ".join(QUESTION_TYPES),
        levels=", ".join(COGNITIVE_LEVELS),
        payload=json.dumps(payload, ensure_ascii=False),
        **extra,
    )


def generate_specification(provider, rows: List[MatrixRow], grade: str = "", subject: str = "") -> List[SpecificationItem]:
    """Ask the service to turn the matrix into specification items.

    Raises:
        ValidationError: if the matrix is not submittable.
        GenerationError: on a failed call or an unusable response.
    """
    payload = build_matrix_payload(rows, grade, subject)
    records = parse_json_response(_call(provider, _prompt(SPECIFICATION_PROMPT, payload, grade, subject)))
    try:
        items = parse_specification([r for r in records if isinstance(r, dict)])
    except ValueError as e:
        raise GenerationError(f"The generation service returned an invalid specification item: {e}") from e
    logger.info("Generated %d specification items", len(items))
    return items


def generate_questions(
    provider, items: List[SpecificationItem], grade: str = "", subject: str = ""
) -> List[Question]:
    """Ask the service to write the questions for a specification.

    Raises:
        ValidationError: if ``items`` holds no questions.
        GenerationError: on a failed call or an unusable response.
    """
    if not any(item.quantity > 0 for item in items):
        raise ValidationError("The specification has no questions to generate.")
    payload = {"grade": grade, "subject": subject, "specification": [i.to_dict() for i in items if i.quantity > 0]}
    records = parse_json_response(_call(provider, _prompt(QUESTIONS_PROMPT, payload, grade, subject)))
    try:
        questions = parse_questions([r for r in records if isinstance(r, dict)])
    except ValueError as e:
        raise GenerationError(f"The generation service returned an invalid question: {e}") from e
    logger.info("Generated %d questions", len(questions))
    return questions


def regenerate_question(
    provider, question: Question, grade: str = "", subject: str = "", notes: Optional[str] = None
) -> Question:
    """Generate a replacement for ``question``; the result keeps its id.

    Raises:
        GenerationError: on a failed call or an unusable response.
    """
    payload = {"question": question.to_dict()}
    notes_line = f"Teacher notes: {notes}" if notes else ""
    record = parse_json_response(
        _call(provider, _prompt(REGENERATE_PROMPT, payload, grade, subject, notes=notes_line)), expect=dict
    )
    record.setdefault("question_type", question.question_type)
    try:
        fresh = Question.from_dict(record)
    except ValueError as e:
        raise GenerationError(f"The generation service returned an invalid question: {e}") from e
    return question.replaced_by(fresh)


def source_mime_type(path: str) -> Optional[str]:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type


def extract_docx_text(path: str) -> str:
    """Plain text of a .docx file: body paragraphs, then table cells row by row."""
    try:
        document = docx.Document(path)
    except Exception as e:
        raise ValidationError(f"Could not read the Word document: {e}") from e
    lines = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(line for line in lines if line.strip())


def generate_similar_questions(
    provider, path: str, grade: str = "", subject: str = "", mime_type: Optional[str] = None
) -> List[Question]:
    """Write new exercises modelled on the ones in a PDF, image or .docx file.

    PDFs and images go to the provider as attached files; the text of a
    Word document is extracted and sent inline.

    Raises:
        ValidationError: for an unsupported file type or a Word document
            without text.
        GenerationError: on a failed call or an unusable response.
    """
    mime_type = mime_type or source_mime_type(path)
    if mime_type not in SIMILAR_SOURCE_MIME_TYPES:
        raise ValidationError("Unsupported file type. Use a PDF, an image (JPEG, PNG, WebP) or a Word (.docx) file.")

    payload = {"grade": grade, "subject": subject}
    prompt = _prompt(SIMILAR_PROMPT, payload, grade, subject)
    if mime_type in WORD_MIME_TYPES:
        text = extract_docx_text(path)
        if not text.strip():
            raise ValidationError("No text could be extracted from this Word document.")
        response = _call(provider, f"{prompt}\nSource exercises:\n{text}")
    else:
        response = _call(provider, prompt, source_path=path)

    records = parse_json_response(response)
    try:
        questions = parse_questions([r for r in records if isinstance(r, dict)])
    except ValueError as e:
        raise GenerationError(f"The generation service returned an invalid question: {e}") from e
    if not questions:
        raise GenerationError("The generation service returned no exercises.")
    logger.info("Generated %d similar questions from %s", len(questions), path)
    return questions


async def generate_specification_async(provider, rows, grade="", subject=""):
    return await asyncio.to_thread(generate_specification, provider, rows, grade, subject)


async def generate_questions_async(provider, items, grade="", subject=""):
    return await asyncio.to_thread(generate_questions, provider, items, grade, subject)


async def generate_similar_questions_async(provider, path, grade="", subject="", mime_type=None):
    return await asyncio.to_thread(generate_similar_questions, provider, path, grade, subject, mime_type)
