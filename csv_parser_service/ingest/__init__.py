# csv_parser_service/ingest/__init__.py
"""
CSV ingestion: header/row validation and record extraction.

Exports:
  - extract(kind, text) -> ExtractionResult
  - extract_persons(text) -> ExtractionResult[Person]
  - extract_prior_pairings(text) -> ExtractionResult[PriorPairing]
"""

from __future__ import annotations

from csv_parser_service.ingest.extract import (
    extract,
    extract_persons,
    extract_prior_pairings,
)

__all__ = [
    "extract",
    "extract_persons",
    "extract_prior_pairings",
]
