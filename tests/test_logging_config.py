"""Tests for the e-mail masking log filter."""

from __future__ import annotations

import logging

import pytest

from finpipe.infrastructure.logging_config import EmailMaskingFilter, mask_email


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("alice@example.com", "al***@example.com"),
        ("to a@b.com and bob.smith@corp.io", "to a***@b.com and bo***@corp.io"),
        ("no address here", "no address here"),
        ("al***@example.com", "al***@example.com"),
    ],
)
def test_mask_email(value: str, expected: str) -> None:
    assert mask_email(value) == expected


def test_filter_masks_message_and_arguments() -> None:
    record = logging.LogRecord(
        name="finpipe",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Sending to %s (cc carol@example.com), attempt %s",
        args=("dave@example.com", 1),
        exc_info=None,
    )

    assert EmailMaskingFilter().filter(record) is True
    assert record.getMessage() == "Sending to da***@example.com (cc ca***@example.com), attempt 1"
