"""Numeric coercion helpers for monetary values."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation


def to_decimal(value: object) -> Decimal:
    """Return ``value`` as a ``Decimal`` without float rounding artifacts.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``.
    Booleans, non-finite numbers and unparsable strings raise ``ValueError``.
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a monetary value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary value: {value!r}") from exc
    else:
        raise ValueError(f"Not a monetary value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a monetary value: {value!r}")
    return result


__all__ = ["to_decimal"]
