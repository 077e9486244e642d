"""
Send one CSV parse request to the configured queue (SQS, or redis when
QUEUE_BACKEND=redis) and print the request_id to look for in the results.

Usage:
  python scripts/send_test_message.py samples/employees.csv
"""

import json
import pathlib
import sys
import uuid

# Ensure repo root (parent of scripts/) is on sys.path
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from csv_parser_service.config import QueueBackend, load_settings
from csv_parser_service.queueing.envelopes import utc_now_rfc3339
from csv_parser_service.queueing.transport import create_aws_client

if len(sys.argv) < 2:
    raise SystemExit("usage: send_test_message.py CSV_FILE [employees|assignments]")

cfg = load_settings()
body = json.dumps(
    {
        "csv_data": pathlib.Path(sys.argv[1]).read_text(encoding="utf-8-sig"),
        "request_id": str(uuid.uuid4()),
        "timestamp": utc_now_rfc3339(),
        "kind": sys.argv[2] if len(sys.argv) > 2 else "employees",
    }
)

if cfg.queue.backend is QueueBackend.REDIS:
    from csv_parser_service.queueing.redis_conn import get_redis

    get_redis(cfg.queue.redis_url).rpush(cfg.queue.queue_url, body)
else:
    create_aws_client("sqs", cfg.aws).send_message(QueueUrl=cfg.queue.queue_url, MessageBody=body)

print("sent", json.loads(body)["request_id"])
