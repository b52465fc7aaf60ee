"""
CLI command modules for MatrixQuiz.

Provides shared helpers for all CLI command modules.
"""

from matrixquiz.config import header_defaults
from matrixquiz.exam_file import load_exam


def load_document(config, path):
    """Load the exam file at ``path`` with the configured header defaults."""
    return load_exam(path, header_defaults(config))
