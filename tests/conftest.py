# ruff: noqa: E402
# tests/conftest.py
from __future__ import annotations

import sys
from collections import deque
from pathlib import Path

import pytest

# Ensure project root importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from csv_parser_service.exceptions import TransportError
from csv_parser_service.queueing.transport import QueueItem

_ENV_VARS = (
    "DEV_MODE",
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "PORT",
    "QUEUE_BACKEND",
    "SQS_QUEUE_CSV_PARSER",
    "SNS_TOPIC_EMPLOYEE_DATA_PARSED",
    "RQ_REDIS_URL",
    "RECEIVE_WAIT_SECONDS",
    "RECEIVE_BACKOFF_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Autouse: a developer's .env / shell must not change mode selection in tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeQueue:
    """In-memory QueueClient: items stay 'in flight' until deleted."""

    def __init__(self, bodies: list[str | bytes] | None = None) -> None:
        self.pending: deque[QueueItem] = deque()
        self.inflight: list[QueueItem] = []
        self.deleted: list[QueueItem] = []
        self.receive_errors = 0
        self.delete_errors = 0
        self.waits: list[int] = []
        for i, body in enumerate(bodies or []):
            self.put(body, message_id=f"m{i}")

    def put(self, body: str | bytes, message_id: str | None = None) -> None:
        self.pending.append(QueueItem(body=body, receipt=f"rh-{message_id}", message_id=message_id))

    def receive(self, wait_seconds: int) -> QueueItem | None:
        self.waits.append(wait_seconds)
        if self.receive_errors:
            self.receive_errors -= 1
            raise TransportError("receive boom")
        if not self.pending:
            return None
        item = self.pending.popleft()
        self.inflight.append(item)
        return item

    def delete(self, item: QueueItem) -> None:
        if self.delete_errors:
            self.delete_errors -= 1
            raise TransportError("delete boom")
        self.inflight.remove(item)
        self.deleted.append(item)


class FakeNotifier:
    def __init__(self) -> None:
        self.published: list[tuple[str, str, dict[str, str]]] = []
        self.errors = 0

    def publish(self, topic: str, payload: str, attributes: dict[str, str]) -> None:
        if self.errors:
            self.errors -= 1
            raise TransportError("publish boom")
        self.published.append((topic, payload, dict(attributes)))


@pytest.fixture()
def fake_queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture()
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()
