"""
Shared pytest fixtures for MatrixQuiz tests.

Fixtures defined here are automatically available to all test files in
the tests/ directory without explicit import.

Fixture summary
---------------
Data builders:
    matrix_rows          -- two-topic matrix built through add_contribution
    spec_items           -- flat specification list with a repeated outcome
    questions            -- objective and essay questions, one with a figure
    header               -- a filled-in ExamHeader
    exam_document        -- ExamDocument combining the above

Rendering:
    fake_converter       -- MathML converter double that records its input
    renderer             -- MathRenderer using fake_converter

Config:
    mock_config          -- standard config dict using MockLLMProvider

Flask:
    flask_app            -- Flask app with CSRF disabled and the mock provider
    flask_client         -- test client for flask_app
"""

import pytest

from matrixquiz.matrix import add_contribution
from matrixquiz.mathtext import MathRenderer
from matrixquiz.questions import ExamDocument, ExamHeader, Question
from matrixquiz.specification import SpecificationItem

# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------


@pytest.fixture
def matrix_rows():
    """Fractions/Addition (3 essay Apply + 4 MC Recall) and Geometry/Triangles (2 TF Understand)."""
    rows = add_contribution([], "Fractions", "Addition", "Adds fractions", "Essay", "Apply", 3)
    rows = add_contribution(rows, "Fractions", "Addition", "", "Multiple choice", "Recall", 4)
    rows = add_contribution(rows, "Geometry", "Triangles", "", "True/False", "Understand", 2)
    return rows


def _item(topic, unit, outcome, q_type, level, quantity):
    return SpecificationItem(
        topic=topic,
        knowledge_unit=unit,
        learning_outcome=outcome,
        question_type=q_type,
        cognitive_level=level,
        quantity=quantity,
    )


@pytest.fixture
def spec_items():
    """Two topics; Fractions has two units, Addition has two outcomes."""
    return [
        _item("Fractions", "Addition", "Adds like fractions", "Multiple choice", "Recall", 2),
        _item("Fractions", "Addition", "Adds unlike fractions", "Essay", "Apply", 1),
        _item("Fractions", "Addition", "adds like fractions.", "Short answer", "Understand", 1),
        _item("Fractions", "Comparison", "Compares fractions", "True/False", "Recall", 2),
        _item("Geometry", "Triangles", "Uses Pythagoras", "Essay", "Apply", 1),
    ]


@pytest.fixture
def questions():
    return [
        Question(id="q1", question_type="Multiple choice", prompt="What is $1+1$?", answer="B"),
        Question(id="q2", question_type="True/False", prompt="$2 > 1$", answer="True"),
        Question(
            id="q3",
            question_type="Essay",
            prompt="Find $BC$.",
            answer="$BC = 5$",
            rubric="Use Pythagoras (2 points).",
            drawing="polygon 10 10 100 10 10 80\npoint 10 10 A",
        ),
    ]


@pytest.fixture
def header():
    return ExamHeader(
        authority="Department of Education",
        school="Riverside High",
        title="Midterm Exam",
        subject="Mathematics",
        grade="7",
        duration="90",
        exam_code="101",
        school_year="2025-2026",
    )


@pytest.fixture
def exam_document(header, matrix_rows, spec_items, questions):
    return ExamDocument(header=header, matrix=matrix_rows, specification=spec_items, questions=questions)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_converter():
    """Converter double producing MathML with an annotation, like real converters do."""
    calls = []

    def convert(latex, display="inline"):
        calls.append((latex, display))
        return (
            f'<math display="{display}"><semantics><mi>{latex}</mi>'
            f'<annotation encoding="application/x-tex">{latex}</annotation></semantics></math>'
        )

    convert.calls = calls
    return convert


@pytest.fixture
def renderer(fake_converter):
    return MathRenderer(converter=fake_converter)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_config():
    """Standard test config with the mock provider."""
    return {
        "llm": {"provider": "mock"},
        "generation": {"default_grade": "7", "default_subject": "Mathematics"},
        "export": {"header": {"school": "Riverside High"}, "figure_width": 350},
        "figures": {"width": 500, "height": 300},
        "logging": {"level": "WARNING"},
    }


# ---------------------------------------------------------------------------
# Flask
# ---------------------------------------------------------------------------


@pytest.fixture
def flask_app(mock_config, monkeypatch):
    """Provide a Flask test app using the mock provider."""
    from matrixquiz.web.app import create_app

    monkeypatch.delenv("LLM_PROVIDER", raising=False)
    app = create_app(mock_config)
    app.config["TESTING"] = True
    app.config["WTF_CSRF_ENABLED"] = False  # Disable CSRF for non-security tests
    yield app


@pytest.fixture
def flask_client(flask_app):
    with flask_app.test_client() as client:
        yield client
