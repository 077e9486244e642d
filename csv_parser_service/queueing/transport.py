# csv_parser_service/queueing/transport.py
"""
Queue and notification clients used by the worker loop.

The worker only sees two small interfaces:

  QueueClient.receive(wait_seconds) -> QueueItem | None
  QueueClient.delete(item) -> None
  Notifier.publish(topic, payload, attributes) -> None

Every implementation raises TransportError for transport failures so the loop
does not need to know about botocore or redis exceptions.

Backends:
  - SqsQueue / SnsNotifier: production (boto3).
  - RedisQueue / RedisNotifier: local runs without AWS. Uses the reliable-list
    pattern: receive moves the item onto a ":processing" list, delete removes
    it from there, and restore_inflight() puts unacknowledged items back on
    the inbound list at startup (stands in for the SQS visibility timeout).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError
from redis import Redis, RedisError

from csv_parser_service.config import AppConfig, AwsConfig, QueueBackend
from csv_parser_service.exceptions import TransportError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueItem:
    body: str | bytes
    receipt: Any  # SQS receipt handle, or the raw redis payload
    message_id: str | None = None


class QueueClient(Protocol):
    def receive(self, wait_seconds: int) -> QueueItem | None: ...

    def delete(self, item: QueueItem) -> None: ...


class Notifier(Protocol):
    def publish(self, topic: str, payload: str, attributes: dict[str, str]) -> None: ...


# ---------------------------------------------------------------------------
# AWS (boto3)
# ---------------------------------------------------------------------------


def create_aws_client(service: str, aws_cfg: AwsConfig) -> Any:
    import boto3

    kwargs: dict[str, Any] = {"region_name": aws_cfg.region}
    if aws_cfg.access_key_id and aws_cfg.secret_access_key:
        kwargs["aws_access_key_id"] = aws_cfg.access_key_id
        kwargs["aws_secret_access_key"] = aws_cfg.secret_access_key
    return boto3.client(service, **kwargs)


class SqsQueue:
    def __init__(self, client: Any, queue_url: str) -> None:
        if not queue_url:
            raise ValueError("SQS_QUEUE_CSV_PARSER must be set to consume CSV parse requests.")
        self.client = client
        self.queue_url = queue_url

    def receive(self, wait_seconds: int) -> QueueItem | None:
        try:
            resp = self.client.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=1,
                WaitTimeSeconds=wait_seconds,
                MessageAttributeNames=["All"],
            )
        except (BotoCoreError, ClientError) as err:
            raise TransportError(f"SQS receive failed: {err}") from err

        messages = resp.get("Messages") or []
        if not messages:
            return None
        msg = messages[0]
        return QueueItem(
            body=msg.get("Body", ""),
            receipt=msg["ReceiptHandle"],
            message_id=msg.get("MessageId"),
        )

    def delete(self, item: QueueItem) -> None:
        try:
            self.client.delete_message(QueueUrl=self.queue_url, ReceiptHandle=item.receipt)
        except (BotoCoreError, ClientError) as err:
            raise TransportError(f"SQS delete failed: {err}") from err


class SnsNotifier:
    def __init__(self, client: Any) -> None:
        self.client = client

    def publish(self, topic: str, payload: str, attributes: dict[str, str]) -> None:
        if not topic:
            raise TransportError("SNS_TOPIC_EMPLOYEE_DATA_PARSED is not set; cannot publish")
        try:
            self.client.publish(
                TopicArn=topic,
                Message=payload,
                MessageAttributes={
                    name: {"DataType": "String", "StringValue": value}
                    for name, value in attributes.items()
                },
            )
        except (BotoCoreError, ClientError) as err:
            raise TransportError(f"SNS publish failed: {err}") from err


# ---------------------------------------------------------------------------
# Redis (local)
# ---------------------------------------------------------------------------


class RedisQueue:
    def __init__(self, redis: Redis, name: str) -> None:
        self.redis = redis
        self.name = name
        self.processing = f"{name}:processing"

    def receive(self, wait_seconds: int) -> QueueItem | None:
        try:
            raw = self.redis.blmove(self.name, self.processing, wait_seconds, src="LEFT", dest="RIGHT")
        except RedisError as err:
            raise TransportError(f"Redis receive failed: {err}") from err
        if raw is None:
            return None
        return QueueItem(body=raw, receipt=raw)

    def delete(self, item: QueueItem) -> None:
        try:
            self.redis.lrem(self.processing, 1, item.receipt)
        except RedisError as err:
            raise TransportError(f"Redis delete failed: {err}") from err

    def restore_inflight(self) -> int:
        """Move items left on the processing list back to the inbound list."""
        moved = 0
        try:
            while self.redis.lmove(self.processing, self.name, src="RIGHT", dest="LEFT") is not None:
                moved += 1
        except RedisError as err:
            raise TransportError(f"Redis restore failed: {err}") from err
        if moved:
            log.warning("Requeued %d unacknowledged items from %s", moved, self.processing)
        return moved


class RedisNotifier:
    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    def publish(self, topic: str, payload: str, attributes: dict[str, str]) -> None:
        envelope = json.dumps({"Message": payload, "MessageAttributes": attributes})
        try:
            self.redis.rpush(topic, envelope)
        except RedisError as err:
            raise TransportError(f"Redis publish failed: {err}") from err


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_transport(cfg: AppConfig) -> tuple[QueueClient, Notifier, str]:
    """Return (queue, notifier, topic) for the configured backend."""
    qcfg = cfg.queue
    if qcfg.backend is QueueBackend.REDIS:
        from csv_parser_service.queueing.redis_conn import get_redis

        r = get_redis(qcfg.redis_url)
        queue = RedisQueue(r, qcfg.queue_url)
        queue.restore_inflight()
        return queue, RedisNotifier(r), qcfg.topic_arn

    sqs = SqsQueue(create_aws_client("sqs", cfg.aws), qcfg.queue_url)
    sns = SnsNotifier(create_aws_client("sns", cfg.aws))
    return sqs, sns, qcfg.topic_arn


__all__ = [
    "QueueItem",
    "QueueClient",
    "Notifier",
    "create_aws_client",
    "SqsQueue",
    "SnsNotifier",
    "RedisQueue",
    "RedisNotifier",
    "build_transport",
]
