"""
Specification and question generation CLI commands.
"""

import logging
import os

from matrixquiz.cli import load_document
from matrixquiz.config import header_defaults
from matrixquiz.errors import GenerationError, ValidationError
from matrixquiz.exam_file import save_exam
from matrixquiz.generation import generate_questions, generate_similar_questions, generate_specification
from matrixquiz.llm_provider import get_provider
from matrixquiz.questions import ExamDocument, ExamHeader

logger = logging.getLogger(__name__)


def register_generate_commands(subparsers):
    """Register generation subcommands."""

    # generate
    p = subparsers.add_parser(
        "generate", help="Generate the specification and questions for an exam document."
    )
    p.add_argument("file", help="Exam document (YAML or JSON); updated in place.")
    p.add_argument(
        "--spec-only", action="store_true", help="Stop after generating the specification."
    )
    p.add_argument(
        "--keep-spec",
        action="store_true",
        help="Reuse the specification already in the file instead of regenerating it.",
    )

    # similar
    p = subparsers.add_parser(
        "similar", help="Generate exercises similar to those in a PDF, image or Word (.docx) file."
    )
    p.add_argument("source", help="Source file with the original exercises.")
    p.add_argument("--output", required=True, help="Exam document to write (YAML or JSON).")
    p.add_argument("--title", default="Similar Exercises", help="Exam title.")
    p.add_argument("--grade", default=None)
    p.add_argument("--subject", default=None)


def _report_generation_error(e):
    if e.needs_reauthorization:
        print(f"Error: the API key was rejected or is missing ({e}). Set GEMINI_API_KEY in .env.")
    else:
        print(f"Error: generation failed: {e}")


def handle_generate(config, args):
    """Run the generation workflow and write the results back to the file."""
    doc = load_document(config, args.file)
    grade, subject = doc.header.grade, doc.header.subject
    try:
        provider = get_provider(config)
        if not (args.keep_spec and doc.specification):
            doc.specification = generate_specification(provider, doc.matrix, grade, subject)
            print(f"[OK] Generated {len(doc.specification)} specification items.")
        if not args.spec_only:
            doc.questions = generate_questions(provider, doc.specification, grade, subject)
            print(f"[OK] Generated {len(doc.questions)} questions.")
    except ValidationError as e:
        print(f"Error: {e}")
        return 1
    except GenerationError as e:
        _report_generation_error(e)
        return 1
    except ValueError as e:
        # Provider misconfiguration, e.g. an unknown provider name.
        print(f"Error: {e}")
        return 1

    save_exam(doc, args.file)
    return 0


def handle_similar(config, args):
    """Generate similar exercises from a source file into a new exam document."""
    if not os.path.isfile(args.source):
        print(f"Error: {args.source} not found.")
        return 1
    overrides = {"title": args.title, "grade": args.grade, "subject": args.subject}
    header = ExamHeader.from_dict({k: v for k, v in overrides.items() if v}, header_defaults(config))
    try:
        questions = generate_similar_questions(get_provider(config), args.source, header.grade, header.subject)
    except ValidationError as e:
        print(f"Error: {e}")
        return 1
    except GenerationError as e:
        _report_generation_error(e)
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    save_exam(ExamDocument(header=header, questions=questions), args.output)
    print(f"[OK] Wrote {len(questions)} similar exercises to {args.output}")
    return 0
