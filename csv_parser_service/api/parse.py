# csv_parser_service/api/parse.py
"""
Development-mode parse endpoints.

  POST /parse/employees     {"csv_data": "..."}
  POST /parse/assignments   {"csv_data": "..."}

Responses:
  200 {"employees": [...], "message": "Successfully parsed employees CSV"}
  400 {"message": "Failed to parse employees CSV", "error": "..."}
  400 {"message": "input data is required"}
  400 {"error": "Invalid JSON"}
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from csv_parser_service.ingest import extract
from csv_parser_service.models import RecordKind

router = APIRouter(prefix="/parse", tags=["parse"])


def handle_extract(kind: RecordKind, body: bytes | str) -> tuple[int, dict[str, Any]]:
    """Decode one request body and run the extractor; returns (status, payload)."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return 400, {"error": "Invalid JSON"}
    if not isinstance(payload, dict):
        return 400, {"error": "Invalid JSON"}

    csv_data = payload.get("csv_data")
    if csv_data is not None and not isinstance(csv_data, str):
        return 400, {"error": "Invalid JSON"}
    if not csv_data:
        return 400, {"message": "input data is required"}

    result = extract(kind, csv_data)
    if not result.succeeded:
        return 400, {"message": f"Failed to parse {kind.value} CSV", "error": result.error}

    return 200, {
        kind.value: result.dump_records(),
        "message": f"Successfully parsed {kind.value} CSV",
    }


async def _respond(kind: RecordKind, request: Request) -> JSONResponse:
    status_code, content = handle_extract(kind, await request.body())
    return JSONResponse(status_code=status_code, content=content)


@router.post("/employees")
async def parse_employees(request: Request) -> JSONResponse:
    return await _respond(RecordKind.EMPLOYEES, request)


@router.post("/assignments")
async def parse_assignments(request: Request) -> JSONResponse:
    return await _respond(RecordKind.ASSIGNMENTS, request)
