# csv_parser_service/exceptions.py
"""
Shared exception classes used across the service.

Extraction failures are not propagated as exceptions past the extractor:
MalformedInputError is raised by the row reader and converted into a failed
ExtractionResult at the extract_* boundary. Transport and decode errors are
raised by the queue/notification clients and handled by the worker loop.
"""

from __future__ import annotations


class MalformedInputError(Exception):
    """
    Raised when CSV text cannot be used at all.

    Examples:
        - Empty input (no header row)
        - Header with fewer columns than the record type needs
        - Ragged quoting on any data row
    """

    pass


class TransportError(Exception):
    """
    Raised when a queue or notification client call fails.

    Receive failures are retried with a fixed backoff; publish failures leave
    the inbound item unacknowledged so the queue redelivers it.
    """

    pass


class DecodeError(Exception):
    """
    Raised when an inbound queue envelope cannot be parsed.

    The same bytes will fail forever, so the item is acknowledged and dropped.
    """

    pass


__all__ = [
    "MalformedInputError",
    "TransportError",
    "DecodeError",
]
