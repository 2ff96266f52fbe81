"""Term normalization: raw linking text to canonical lookup key."""

from __future__ import annotations

import re
from typing import Final

_ARGUMENT_LIST_RE: Final[re.Pattern[str]] = re.compile(r"\(.+\)")
_EMPTY_ARGUMENTS: Final[str] = "()"


def normalize_term(term: str, kind: str) -> str:
    """
    Return the index key for ``term`` of the given (already remapped) ``kind``.

    - ``enum-value``: every leading and trailing double quote is removed
      (``'"foo"'`` -> ``foo``).
    - ``method``: a missing argument list is appended (``bar`` -> ``bar()``).
    - anything else is returned unchanged.

    The function is idempotent for every input.
    """

    if kind == "enum-value":
        return term.strip('"')
    if kind == "method" and not term.endswith(")"):
        return term + _EMPTY_ARGUMENTS
    return term


def has_argument_list(term: str) -> bool:
    """``True`` when ``term`` carries a non-empty parenthesized argument list."""

    return _ARGUMENT_LIST_RE.search(term) is not None


def strip_arguments(term: str) -> str:
    """Collapse the argument list of a method term: ``foo(a, b)`` -> ``foo()``."""

    return _ARGUMENT_LIST_RE.sub(_EMPTY_ARGUMENTS, term, count=1)


__all__ = ["has_argument_list", "normalize_term", "strip_arguments"]
