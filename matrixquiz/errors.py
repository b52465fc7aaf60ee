"""
Exception types shared across MatrixQuiz modules.
"""

CREDENTIAL_ERROR = "credential"
GENERIC_ERROR = "generic"

# Substrings (lower-cased) that identify a missing or rejected API credential.
CREDENTIAL_MARKERS = (
    "entity was not found",
    "api key",
    "api_key",
    "permission denied",
    "permission_denied",
    "unauthenticated",
    "401",
    "403",
)


class MatrixQuizError(Exception):
    """Base class for all MatrixQuiz errors."""


class ValidationError(MatrixQuizError):
    """Input rejected at an API boundary (e.g. an empty matrix submitted)."""


class DrawError(MatrixQuizError):
    """A figure program could not be parsed or drawn."""

    def __init__(self, message, line_number=None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class GenerationError(MatrixQuizError):
    """The content-generation collaborator failed.

    ``kind`` is ``"credential"`` when the failure means the API key is
    missing or invalid (the caller should start re-authorization) and
    ``"generic"`` otherwise.
    """

    def __init__(self, message, kind=GENERIC_ERROR):
        super().__init__(message)
        self.kind = kind

    @property
    def needs_reauthorization(self):
        return self.kind == CREDENTIAL_ERROR


def classify_error(exc):
    """Classify an exception from an external call by its message content.

    Returns:
        ``"credential"`` or ``"generic"``.
    """
    if isinstance(exc, GenerationError):
        return exc.kind
    message = str(exc).lower()
    if any(marker in message for marker in CREDENTIAL_MARKERS):
        return CREDENTIAL_ERROR
    return GENERIC_ERROR
