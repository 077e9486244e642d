# csv_parser_service/queueing/envelopes.py
"""
Wire shapes for the SQS request and the SNS result notification.

Inbound (SQS body):
  {"csv_data": "...", "previous_assignments": [...], "request_id": "...",
   "timestamp": "...", "kind": "employees"}

Outbound (SNS message):
  {"success": true, "employees": [...], "previous_assignments": [...],
   "request_id": "...", "timestamp": "2025-12-01T10:00:00Z"}
  {"success": false, "error": "...", "request_id": "...", "timestamp": "..."}
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from csv_parser_service.exceptions import DecodeError
from csv_parser_service.models import ExtractionResult, PriorPairing, RecordKind


def utc_now_rfc3339() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


_PAIRING_WIRE_KEYS = ("employee_name", "employee_email", "secret_child_name", "secret_child_email")


class ExtractionRequest(BaseModel):
    csv_data: str = ""
    previous_assignments: list[PriorPairing] = Field(default_factory=list)
    request_id: str = ""
    timestamp: str = ""
    kind: RecordKind = RecordKind.EMPLOYEES

    model_config = ConfigDict(extra="ignore")

    @field_validator("csv_data", "request_id", "timestamp", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("kind", mode="before")
    @classmethod
    def _null_kind_as_default(cls, v: Any) -> Any:
        return RecordKind.EMPLOYEES if v is None else v

    @field_validator("previous_assignments", mode="before")
    @classmethod
    def _fill_missing_pairing_fields(cls, v: Any) -> Any:
        # forwarded as-is; absent or null fields become ""
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        return [
            {key: ("" if item.get(key) is None else item[key]) for key in _PAIRING_WIRE_KEYS}
            if isinstance(item, dict)
            else item
            for item in v
        ]


def decode_request(body: str | bytes) -> ExtractionRequest:
    """Parse a queue item body; any failure becomes DecodeError."""
    try:
        return ExtractionRequest.model_validate_json(body)
    except ValidationError as err:
        raise DecodeError(str(err)) from err


class ResultNotification(BaseModel):
    success: bool
    employees: list[dict[str, str]] | None = None
    assignments: list[dict[str, str]] | None = None
    previous_assignments: list[dict[str, str]] | None = None
    request_id: str
    timestamp: str
    error: str | None = None

    @classmethod
    def from_result(
        cls,
        request: ExtractionRequest,
        result: ExtractionResult,
        *,
        timestamp: str | None = None,
    ) -> ResultNotification:
        ts = timestamp or utc_now_rfc3339()
        if not result.succeeded:
            return cls(success=False, error=result.error, request_id=request.request_id, timestamp=ts)

        fields: dict[str, Any] = {request.kind.value: result.dump_records()}
        if request.previous_assignments:
            fields["previous_assignments"] = [
                p.model_dump(by_alias=True) for p in request.previous_assignments
            ]
        return cls(success=True, request_id=request.request_id, timestamp=ts, **fields)

    def to_message(self) -> str:
        # omitempty on the optional fields, like the consumers expect
        return json.dumps(self.model_dump(exclude_none=True), separators=(",", ":"))


__all__ = [
    "utc_now_rfc3339",
    "ExtractionRequest",
    "decode_request",
    "ResultNotification",
]
