"""
Tests for matrixquiz.errors.
"""

import pytest

from matrixquiz.errors import CREDENTIAL_ERROR, GENERIC_ERROR, DrawError, GenerationError, classify_error


@pytest.mark.parametrize(
    "message",
    ["Requested entity was not found.", "API key not valid", "403 Forbidden", "PERMISSION_DENIED", "Unauthenticated"],
)
def test_credential_messages(message):
    assert classify_error(RuntimeError(message)) == CREDENTIAL_ERROR


def test_other_messages_are_generic():
    assert classify_error(TimeoutError("deadline exceeded")) == GENERIC_ERROR


def test_generation_error_keeps_its_kind():
    err = GenerationError("no key", kind=CREDENTIAL_ERROR)
    assert classify_error(err) == CREDENTIAL_ERROR
    assert err.needs_reauthorization


def test_draw_error_names_line():
    assert str(DrawError("unknown command 'blob'", line_number=3)) == "line 3: unknown command 'blob'"
