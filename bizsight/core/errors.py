"""Errors raised by the analytics engine."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Input cannot be analysed (empty series, K out of range, bad parameter).

    Numeric degeneracies such as zero variance are not errors; they resolve
    to documented fallback values instead.
    """
