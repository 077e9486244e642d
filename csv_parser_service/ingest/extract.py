# csv_parser_service/ingest/extract.py
"""
CSV -> validated records.

Both record types follow the same rules:
  - The header row must exist and be at least as wide as the record type.
  - Any row-level parse error (bad quoting) fails the whole extraction.
  - Rows that are too short, or have a blank required field, are skipped.
  - Output keeps source row order.

Failures are returned as ExtractionResult.fail(...), never raised.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from csv_parser_service.exceptions import MalformedInputError
from csv_parser_service.ingest.validators import required_fields, validate_header_csv
from csv_parser_service.models import ExtractionResult, Person, PriorPairing, RecordKind

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Layout:
    columns: tuple[str, ...]
    build: Callable[[list[str]], Person | PriorPairing]

    @property
    def min_columns(self) -> int:
        return len(self.columns)


_PERSON_LAYOUT = _Layout(
    columns=("name", "email"),
    build=lambda f: Person(name=f[0], email=f[1]),
)

_PAIRING_LAYOUT = _Layout(
    columns=("employee_name", "employee_email", "secret_child_name", "secret_child_email"),
    build=lambda f: PriorPairing(
        giver_name=f[0],
        giver_email=f[1],
        recipient_name=f[2],
        recipient_email=f[3],
    ),
)


def _check_quotes(raw: str, first_line: int) -> None:
    """
    Reject a quote inside a field that did not open with one.

    csv.reader(strict=True) catches junk after a closing quote but keeps a
    bare quote in an unquoted field as a literal character.
    """
    line = first_line
    field_start = True
    in_quotes = False
    i = 0
    while i < len(raw):
        ch = raw[i]
        if in_quotes:
            if ch == '"':
                if raw[i + 1 : i + 2] == '"':
                    i += 1
                else:
                    in_quotes = False
            elif ch == "\n":
                line += 1
        elif ch == '"':
            if not field_start:
                raise MalformedInputError(f'line {line}: bare " in non-quoted field')
            in_quotes = True
            field_start = False
        elif ch == ",":
            field_start = True
        elif ch in "\r\n":
            field_start = True
            if ch == "\n":
                line += 1
        else:
            field_start = False
        i += 1


def _iter_rows(text: str) -> Iterator[list[str]]:
    """
    Yield non-blank CSV rows; convert csv.Error into MalformedInputError.

    Blank lines carry no fields and are ignored entirely (they never count as
    the header).
    """
    consumed: list[str] = []

    def _lines() -> Iterator[str]:
        for line in io.StringIO(text, newline=""):
            consumed.append(line)
            yield line

    reader = csv.reader(_lines(), strict=True)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as err:
            raise MalformedInputError(f"line {reader.line_num}: {err}") from err
        _check_quotes("".join(consumed), reader.line_num - len(consumed) + 1)
        consumed.clear()
        if row:
            yield row


def _extract(text: str, layout: _Layout) -> ExtractionResult:
    rows = _iter_rows(text or "")

    try:
        header: Sequence[str] | None = next(rows, None)
    except MalformedInputError as err:
        return ExtractionResult.fail(f"error reading CSV header: {err}")
    try:
        validate_header_csv(header, layout.min_columns, layout.columns)
    except MalformedInputError as err:
        return ExtractionResult.fail(str(err))

    records = []
    skipped = 0
    try:
        for row in rows:
            fields = required_fields(row, layout.min_columns)
            if fields is None:
                skipped += 1
                continue
            records.append(layout.build(fields))
    except MalformedInputError as err:
        return ExtractionResult.fail(f"error reading CSV row: {err}")

    if skipped:
        log.debug("Skipped %d incomplete CSV rows", skipped)
    return ExtractionResult.ok(records)


def extract_persons(text: str) -> ExtractionResult[Person]:
    """Parse an employees CSV (name, email, ...)."""
    return _extract(text, _PERSON_LAYOUT)


def extract_prior_pairings(text: str) -> ExtractionResult[PriorPairing]:
    """Parse a previous-assignments CSV (giver name/email, recipient name/email, ...)."""
    return _extract(text, _PAIRING_LAYOUT)


_EXTRACTORS: dict[RecordKind, Callable[[str], ExtractionResult]] = {
    RecordKind.EMPLOYEES: extract_persons,
    RecordKind.ASSIGNMENTS: extract_prior_pairings,
}


def extract(kind: RecordKind | str, text: str) -> ExtractionResult:
    """Single entry point shared by the HTTP handlers and the queue worker."""
    return _EXTRACTORS[RecordKind(kind)](text)


__all__ = [
    "extract",
    "extract_persons",
    "extract_prior_pairings",
]
