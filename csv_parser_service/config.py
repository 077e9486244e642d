from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name, str(default)).strip()
    try:
        return int(v)
    except ValueError as err:
        raise ValueError(f"Environment variable {name} must be an integer; got {v!r}") from err


def _getenv_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    """
    Read a loosely-typed boolean from the environment.

    Treats "1", "true", "yes", "on" (case-insensitive) as True;
    "0", "false", "no", "off", "" as False. If unset, returns default.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    # Fallback: any other non-empty value -> True
    return True


# Load .env from project root if present
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env", override=False)

SERVICE_NAME = "csv-parser-service"
# Source label attached to every SNS publish
PUBLISH_SOURCE_LABEL = "csv-parser"

DEFAULT_PORT = 8080
DEFAULT_REDIS_URL = "redis://127.0.0.1:6379/0"
RECEIVE_WAIT_SECONDS = 20
RECEIVE_BACKOFF_SECONDS = 5


class ServiceMode(str, Enum):
    DEVELOPMENT = "development"  # HTTP parse endpoints
    PRODUCTION = "production"  # SQS -> SNS worker


class QueueBackend(str, Enum):
    SQS = "sqs"
    REDIS = "redis"


@dataclass(frozen=True)
class AwsConfig:
    """
    Minimal AWS config shared by the SQS and SNS clients.

    Access key / secret are optional; if unset, boto3 will fall back to the
    default AWS credential chain (env, shared config, EC2/ECS metadata, etc.).
    """

    region: str
    access_key_id: str | None
    secret_access_key: str | None


@dataclass(frozen=True)
class QueueConfig:
    backend: QueueBackend
    queue_url: str
    topic_arn: str
    redis_url: str
    receive_wait_seconds: int
    receive_backoff_seconds: int


@dataclass(frozen=True)
class AppConfig:
    mode: ServiceMode
    port: int
    log_level: str
    aws: AwsConfig
    queue: QueueConfig

    @property
    def is_development(self) -> bool:
        return self.mode is ServiceMode.DEVELOPMENT


def select_mode() -> ServiceMode:
    """
    DEV_MODE=true, or no AWS_REGION at all, means the HTTP parse endpoints.
    Anything else runs the queue worker.
    """
    if _getenv_bool("DEV_MODE", False) or not _getenv_str("AWS_REGION", ""):
        return ServiceMode.DEVELOPMENT
    return ServiceMode.PRODUCTION


def load_aws_config() -> AwsConfig:
    region = _getenv_str("AWS_REGION", "") or "us-east-1"
    access_key_id = os.getenv("AWS_ACCESS_KEY_ID") or None
    secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY") or None

    if (access_key_id and not secret_access_key) or (secret_access_key and not access_key_id):
        raise ValueError(
            "Both AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set "
            "together, or neither (to use the default AWS credential chain).",
        )

    return AwsConfig(
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )


def load_queue_config() -> QueueConfig:
    raw_backend = _getenv_str("QUEUE_BACKEND", QueueBackend.SQS.value).lower()
    try:
        backend = QueueBackend(raw_backend)
    except ValueError as err:
        raise ValueError(
            f"Environment variable QUEUE_BACKEND must be 'sqs' or 'redis'; got {raw_backend!r}"
        ) from err

    # redis backend: the same variables name the inbound list and the result list
    local = backend is QueueBackend.REDIS
    return QueueConfig(
        backend=backend,
        queue_url=_getenv_str("SQS_QUEUE_CSV_PARSER", "csv_parser" if local else ""),
        topic_arn=_getenv_str("SNS_TOPIC_EMPLOYEE_DATA_PARSED", "employee_data_parsed" if local else ""),
        redis_url=_getenv_str("RQ_REDIS_URL", DEFAULT_REDIS_URL),
        receive_wait_seconds=_getenv_int("RECEIVE_WAIT_SECONDS", RECEIVE_WAIT_SECONDS),
        receive_backoff_seconds=_getenv_int("RECEIVE_BACKOFF_SECONDS", RECEIVE_BACKOFF_SECONDS),
    )


def load_settings() -> AppConfig:
    return AppConfig(
        mode=select_mode(),
        port=_getenv_int("PORT", DEFAULT_PORT),
        log_level=_getenv_str("LOG_LEVEL", "INFO").upper(),
        aws=load_aws_config(),
        queue=load_queue_config(),
    )


__all__ = [
    "SERVICE_NAME",
    "PUBLISH_SOURCE_LABEL",
    "RECEIVE_WAIT_SECONDS",
    "RECEIVE_BACKOFF_SECONDS",
    "ServiceMode",
    "QueueBackend",
    "AwsConfig",
    "QueueConfig",
    "AppConfig",
    "select_mode",
    "load_aws_config",
    "load_queue_config",
    "load_settings",
]
