"""
Tests for fault classification.
"""

import pytest

from surveytaker.errors import (
    LOAD_MESSAGES,
    SUBMIT_MESSAGES,
    LoadFault,
    RemoteCallError,
    SubmitFault,
    classify_load_fault,
    classify_submit_fault,
    fault_message,
)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Survey not found", LoadFault.NOT_FOUND),
        ("Record does not exist", LoadFault.NOT_FOUND),
        ("Insufficient access rights on cross-reference id", LoadFault.PERMISSION),
        ("You do not have PERMISSION to view this", LoadFault.PERMISSION),
        ("Invalid or expired token", LoadFault.EXPIRED),
        ("This survey has already been submitted", LoadFault.ALREADY_SUBMITTED),
        ("Network error: failed to fetch", LoadFault.NETWORK),
        ("Something odd happened", LoadFault.UNKNOWN),
        ("", LoadFault.UNKNOWN),
        (None, LoadFault.UNKNOWN),
    ],
)
def test_classify_load_fault(message, expected):
    assert classify_load_fault(message) is expected


@pytest.mark.parametrize(
    "message, expected",
    [
        ("DUPLICATE_VALUE: response exists", SubmitFault.DUPLICATE),
        ("Survey already submitted for this invitation", SubmitFault.DUPLICATE),
        ("Invitation expired", SubmitFault.EXPIRED),
        ("Insufficient access", SubmitFault.PERMISSION),
        ("Network connection lost", SubmitFault.NETWORK),
        ("Request timed out", SubmitFault.TIMEOUT),
        ("TimeoutError", SubmitFault.TIMEOUT),
        ("Validation rule failed", SubmitFault.UNKNOWN),
    ],
)
def test_classify_submit_fault(message, expected):
    assert classify_submit_fault(message) is expected


def test_every_category_has_a_distinct_message():
    assert set(LOAD_MESSAGES) == set(LoadFault)
    assert set(SUBMIT_MESSAGES) == set(SubmitFault)
    assert len(set(LOAD_MESSAGES.values())) == len(LoadFault)
    assert len(set(SUBMIT_MESSAGES.values())) == len(SubmitFault)


class TestFaultMessage:
    """Test message extraction from exceptions."""

    def test_body_message_preferred(self):
        """The error body message wins over the exception text."""
        exc = RemoteCallError("outer", body={"message": "inner"})
        assert fault_message(exc) == "inner"

    def test_exception_text(self):
        """Falls back to the exception text."""
        assert fault_message(ValueError("boom")) == "boom"

    def test_class_name(self):
        """Falls back to the class name when there is no text."""
        assert fault_message(TimeoutError()) == "TimeoutError"
