from __future__ import annotations

import re
from collections.abc import Sequence

from csv_parser_service.exceptions import MalformedInputError

# Minimal “has visible text” (handles unicode whitespace)
_VIS_RE = re.compile(r"\S", re.UNICODE)


def validate_header_csv(header: Sequence[str] | None, min_columns: int, names: Sequence[str]) -> None:
    """
    The header row only has to be wide enough; column titles are not checked.

    Raises MalformedInputError naming the expected columns, e.g.
      invalid CSV format: expected at least 2 columns (name, email)
    """
    if header is None:
        raise MalformedInputError("error reading CSV header: EOF")
    if len(header) < min_columns:
        raise MalformedInputError(
            f"invalid CSV format: expected at least {min_columns} columns ({', '.join(names)})"
        )


def has_visible_text(val: object) -> bool:
    s = "" if val is None else str(val)
    return bool(_VIS_RE.search(s))


def required_fields(row: Sequence[str], count: int) -> list[str] | None:
    """
    Return the first `count` fields stripped, or None if the row must be skipped.

    A row is skipped (not an error) when it is too short or when any of the
    required fields is blank after trimming.
    """
    if len(row) < count:
        return None
    fields = [str(v).strip() for v in row[:count]]
    if not all(has_visible_text(v) for v in fields):
        return None
    return fields


__all__ = [
    "validate_header_csv",
    "has_visible_text",
    "required_fields",
]
