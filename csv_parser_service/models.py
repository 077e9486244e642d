# csv_parser_service/models.py
"""
Record shapes produced by the CSV extractor.

Person and PriorPairing are the only records the service emits. JSON field
names for PriorPairing keep the wire names used by the assignment service
(employee_* / secret_child_*); Python code uses the giver/recipient names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class RecordKind(str, Enum):
    EMPLOYEES = "employees"
    ASSIGNMENTS = "assignments"


class Person(BaseModel):
    """One employee row: name + email, both non-empty after trimming."""

    name: str
    email: str

    model_config = ConfigDict(extra="ignore", frozen=True)


class PriorPairing(BaseModel):
    """One previous-year assignment row (giver -> recipient)."""

    giver_name: str = Field(alias="employee_name")
    giver_email: str = Field(alias="employee_email")
    recipient_name: str = Field(alias="secret_child_name")
    recipient_email: str = Field(alias="secret_child_email")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


R = TypeVar("R", Person, PriorPairing)


@dataclass(frozen=True)
class ExtractionResult(Generic[R]):
    """
    Outcome of one extraction: either records or an error, never both.

    records keeps source row order. An empty list is a success.
    """

    records: list[R] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.records is None) == (self.error is None):
            raise ValueError("ExtractionResult needs exactly one of records or error")

    @classmethod
    def ok(cls, records: list[R]) -> ExtractionResult[R]:
        return cls(records=list(records))

    @classmethod
    def fail(cls, error: str) -> ExtractionResult[R]:
        return cls(error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def dump_records(self) -> list[dict[str, str]]:
        """JSON-ready records (wire field names); empty on failure."""
        return [r.model_dump(by_alias=True) for r in self.records or []]


__all__ = [
    "RecordKind",
    "Person",
    "PriorPairing",
    "ExtractionResult",
]
