# tests/test_worker.py
from __future__ import annotations

import json
import re

import pytest

from csv_parser_service.queueing.worker import Outcome, ParserWorker

TOPIC = "arn:aws:sns:us-east-1:123456789012:employee-data-parsed"
RFC3339_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


def _request(csv_data: str, request_id: str = "req-1", **extra) -> str:
    return json.dumps(
        {"csv_data": csv_data, "request_id": request_id, "timestamp": "2025-12-01T10:00:00Z", **extra}
    )


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def worker(fake_queue, fake_notifier, sleeps) -> ParserWorker:
    return ParserWorker(
        fake_queue,
        fake_notifier,
        TOPIC,
        wait_seconds=20,
        backoff_seconds=5,
        sleep=sleeps.append,
    )


def test_idle_poll(worker, fake_queue, fake_notifier):
    assert worker.process_one() is Outcome.IDLE
    assert fake_queue.waits == [20]
    assert fake_notifier.published == []


def test_success_publishes_then_deletes(worker, fake_queue, fake_notifier):
    fake_queue.put(_request("Name,Email\nJohn Doe,john@x.com\nJane Smith,jane@x.com\n"), "m1")

    assert worker.process_one() is Outcome.PUBLISHED

    [(topic, payload, attrs)] = fake_notifier.published
    assert topic == TOPIC
    msg = json.loads(payload)
    assert msg["success"] is True
    assert msg["request_id"] == "req-1"
    assert msg["employees"] == [
        {"name": "John Doe", "email": "john@x.com"},
        {"name": "Jane Smith", "email": "jane@x.com"},
    ]
    assert "error" not in msg
    assert RFC3339_UTC.match(msg["timestamp"])
    assert attrs["service"] == "csv-parser"
    assert RFC3339_UTC.match(attrs["timestamp"])

    assert [i.message_id for i in fake_queue.deleted] == ["m1"]
    assert fake_queue.inflight == []


def test_malformed_csv_publishes_failure_and_deletes(worker, fake_queue, fake_notifier):
    fake_queue.put(_request("Name", request_id="req-bad"), "m1")

    assert worker.process_one() is Outcome.PUBLISHED

    msg = json.loads(fake_notifier.published[0][1])
    assert msg["success"] is False
    assert msg["request_id"] == "req-bad"
    assert "expected at least 2 columns" in msg["error"]
    assert "employees" not in msg
    assert len(fake_queue.deleted) == 1


def test_header_only_publishes_empty_success(worker, fake_queue, fake_notifier):
    fake_queue.put(_request("Name,Email"), "m1")
    assert worker.process_one() is Outcome.PUBLISHED
    msg = json.loads(fake_notifier.published[0][1])
    assert msg["success"] is True
    assert msg["employees"] == []


@pytest.mark.parametrize("body", ["{not json", "[]", '"text"', b"\x80\x81", '{"kind": "managers"}'])
def test_undecodable_envelope_is_dropped_without_publish(worker, fake_queue, fake_notifier, body):
    fake_queue.put(body, "m1")

    assert worker.process_one() is Outcome.DROPPED
    assert fake_notifier.published == []
    assert [i.message_id for i in fake_queue.deleted] == ["m1"]


def test_publish_failure_leaves_item_for_redelivery(worker, fake_queue, fake_notifier):
    fake_queue.put(_request("Name,Email\nA,a@x.com\n"), "m1")
    fake_notifier.errors = 1

    assert worker.process_one() is Outcome.PUBLISH_FAILED
    assert fake_queue.deleted == []
    assert [i.message_id for i in fake_queue.inflight] == ["m1"]

    # Queue redelivers after the visibility timeout; second attempt succeeds
    item = fake_queue.inflight.pop()
    fake_queue.pending.append(item)
    assert worker.process_one() is Outcome.PUBLISHED
    assert [i.message_id for i in fake_queue.deleted] == ["m1"]
    assert len(fake_notifier.published) == 1


def test_delete_failure_after_publish_is_reported(worker, fake_queue, fake_notifier):
    fake_queue.put(_request("Name,Email\nA,a@x.com\n"), "m1")
    fake_queue.delete_errors = 1

    assert worker.process_one() is Outcome.ACK_FAILED
    assert len(fake_notifier.published) == 1
    assert fake_queue.deleted == []


def test_receive_error_backs_off_then_recovers(worker, fake_queue, sleeps):
    fake_queue.receive_errors = 2
    fake_queue.put(_request("Name,Email\nA,a@x.com\n"), "m1")

    assert worker.process_one() is Outcome.RECEIVE_FAILED
    assert worker.process_one() is Outcome.RECEIVE_FAILED
    assert sleeps == [5, 5]
    assert worker.process_one() is Outcome.PUBLISHED


def test_notifications_follow_receive_order(worker, fake_queue, fake_notifier):
    for i in range(3):
        fake_queue.put(_request(f"Name,Email\nP{i},p{i}@x.com\n", request_id=f"req-{i}"), f"m{i}")

    for _ in range(3):
        worker.process_one()

    ids = [json.loads(p)["request_id"] for _, p, _ in fake_notifier.published]
    assert ids == ["req-0", "req-1", "req-2"]


def test_assignments_kind_and_previous_assignments_forwarded(worker, fake_queue, fake_notifier):
    prev = [
        {
            "employee_name": "A",
            "employee_email": "a@x.com",
            "secret_child_name": "B",
            "secret_child_email": "b@x.com",
        }
    ]
    fake_queue.put(_request("Name,Email\nA,a@x.com\nB,b@x.com\n", previous_assignments=prev), "m1")
    fake_queue.put(_request("A,B,C,D\nJ,j@x.com,K,k@x.com\n", request_id="req-2", kind="assignments"), "m2")

    worker.process_one()
    worker.process_one()

    first, second = (json.loads(p) for _, p, _ in fake_notifier.published)
    assert first["previous_assignments"] == prev
    assert len(first["employees"]) == 2
    assert second["assignments"][0]["secret_child_name"] == "K"
    assert "employees" not in second


def test_run_forever_stops_when_asked(fake_queue, fake_notifier):
    fake_queue.put(_request("Name,Email\nA,a@x.com\n"), "m1")

    class StoppingNotifier(type(fake_notifier)):
        def publish(self, topic, payload, attributes):
            super().publish(topic, payload, attributes)
            worker.stop()

    notifier = StoppingNotifier()
    worker = ParserWorker(fake_queue, notifier, TOPIC, sleep=lambda _s: None)
    worker.run_forever()

    assert worker.stopped
    assert len(notifier.published) == 1
    assert len(fake_queue.deleted) == 1


def test_partial_previous_assignments_are_forwarded_with_blanks(worker, fake_queue, fake_notifier):
    prev = [{"employee_name": "A", "employee_email": "a@x.com"}]
    fake_queue.put(_request("Name,Email\nA,a@x.com\n", previous_assignments=prev), "m1")

    assert worker.process_one() is Outcome.PUBLISHED

    msg = json.loads(fake_notifier.published[0][1])
    assert msg["success"] is True
    assert msg["previous_assignments"] == [
        {
            "employee_name": "A",
            "employee_email": "a@x.com",
            "secret_child_name": "",
            "secret_child_email": "",
        }
    ]
    assert [i.message_id for i in fake_queue.deleted] == ["m1"]


def test_null_csv_data_publishes_header_failure(worker, fake_queue, fake_notifier):
    fake_queue.put(json.dumps({"csv_data": None, "request_id": "r2", "previous_assignments": None}), "m1")

    assert worker.process_one() is Outcome.PUBLISHED

    msg = json.loads(fake_notifier.published[0][1])
    assert msg["success"] is False
    assert msg["request_id"] == "r2"
    assert msg["error"] == "error reading CSV header: EOF"
    assert len(fake_queue.deleted) == 1


def test_run_forever_survives_unexpected_errors(fake_queue, fake_notifier):
    sleeps: list[float] = []

    class FlakyQueue(type(fake_queue)):
        calls = 0

        def receive(self, wait_seconds):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("unexpected")
            item = super().receive(wait_seconds)
            if item is None:
                worker.stop()
            return item

    queue = FlakyQueue([_request("Name,Email\nA,a@x.com\n")])
    worker = ParserWorker(queue, fake_notifier, TOPIC, backoff_seconds=5, sleep=sleeps.append)
    worker.run_forever()

    assert sleeps == [5]
    assert len(fake_notifier.published) == 1
    assert len(queue.deleted) == 1
