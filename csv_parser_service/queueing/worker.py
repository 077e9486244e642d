# csv_parser_service/queueing/worker.py
"""
Production loop: SQS request -> extract -> SNS notification -> delete.

One item at a time, in receive order. The inbound item is deleted only after
the notification was published, so a failed publish leaves the message for
the queue to redeliver (at-least-once; downstream must tolerate duplicate
notifications for the same request_id).

Envelopes that do not decode are deleted without publishing anything.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum

from csv_parser_service.config import (
    PUBLISH_SOURCE_LABEL,
    RECEIVE_BACKOFF_SECONDS,
    RECEIVE_WAIT_SECONDS,
    AppConfig,
    load_settings,
)
from csv_parser_service.exceptions import DecodeError, TransportError
from csv_parser_service.ingest import extract
from csv_parser_service.queueing.envelopes import (
    ResultNotification,
    decode_request,
    utc_now_rfc3339,
)
from csv_parser_service.queueing.transport import Notifier, QueueClient, QueueItem, build_transport

log = logging.getLogger(__name__)


class Outcome(str, Enum):
    IDLE = "idle"  # long-poll returned nothing
    RECEIVE_FAILED = "receive_failed"
    DROPPED = "dropped"  # undecodable envelope, deleted
    PUBLISHED = "published"  # notification sent and item deleted
    PUBLISH_FAILED = "publish_failed"  # item left for redelivery
    ACK_FAILED = "ack_failed"  # published, delete failed; will be redelivered


class ParserWorker:
    def __init__(
        self,
        queue: QueueClient,
        notifier: Notifier,
        topic: str,
        *,
        wait_seconds: int = RECEIVE_WAIT_SECONDS,
        backoff_seconds: float = RECEIVE_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.queue = queue
        self.notifier = notifier
        self.topic = topic
        self.wait_seconds = wait_seconds
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run_forever(self) -> None:
        log.info("Polling for CSV parse requests (publishing to %s)", self.topic)
        while not self._stop.is_set():
            try:
                self.process_one()
            except Exception:
                log.exception("Unexpected error in worker loop; retrying in %ss", self.backoff_seconds)
                self._sleep(self.backoff_seconds)
        log.info("Worker stopped")

    def process_one(self) -> Outcome:
        try:
            item = self.queue.receive(self.wait_seconds)
        except TransportError:
            log.exception("Error receiving message; retrying in %ss", self.backoff_seconds)
            self._sleep(self.backoff_seconds)
            return Outcome.RECEIVE_FAILED

        if item is None:
            return Outcome.IDLE
        return self.handle(item)

    def handle(self, item: QueueItem) -> Outcome:
        try:
            request = decode_request(item.body)
        except DecodeError as err:
            log.warning("Dropping undecodable message %s: %s", item.message_id, err)
            return Outcome.DROPPED if self._ack(item) else Outcome.ACK_FAILED

        result = extract(request.kind, request.csv_data)
        notification = ResultNotification.from_result(request, result)
        if not result.succeeded:
            log.info("Request %s failed to parse: %s", request.request_id, result.error)

        try:
            self.notifier.publish(
                self.topic,
                notification.to_message(),
                {"service": PUBLISH_SOURCE_LABEL, "timestamp": utc_now_rfc3339()},
            )
        except TransportError:
            log.exception(
                "Error publishing result for request %s; leaving message for redelivery",
                request.request_id,
            )
            return Outcome.PUBLISH_FAILED

        if not self._ack(item):
            return Outcome.ACK_FAILED
        log.info(
            "Processed request %s (success=%s, records=%d)",
            request.request_id,
            result.succeeded,
            len(result.records or []),
        )
        return Outcome.PUBLISHED

    def _ack(self, item: QueueItem) -> bool:
        try:
            self.queue.delete(item)
        except TransportError:
            log.exception("Error deleting message %s", item.message_id)
            return False
        return True


def build_worker(cfg: AppConfig | None = None) -> ParserWorker:
    cfg = cfg or load_settings()
    queue, notifier, topic = build_transport(cfg)
    return ParserWorker(
        queue,
        notifier,
        topic,
        wait_seconds=cfg.queue.receive_wait_seconds,
        backoff_seconds=cfg.queue.receive_backoff_seconds,
    )


def start_in_background(worker: ParserWorker) -> threading.Thread:
    t = threading.Thread(target=worker.run_forever, name="csv-parser-worker", daemon=True)
    t.start()
    return t


def run() -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    worker = build_worker()
    print("*** Starting csv-parser worker")
    print(f"Topic: {worker.topic}")
    worker.run_forever()


if __name__ == "__main__":
    run()
