# scripts/run_worker.py
from __future__ import annotations

import logging
import os
import signal
import sys

from csv_parser_service.queueing.worker import build_worker

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)

if __name__ == "__main__":
    # Accept a backend override via CLI: e.g. "redis" for local runs without AWS
    if len(sys.argv) > 1:
        os.environ["QUEUE_BACKEND"] = sys.argv[1]
    worker = build_worker()
    # Finish the in-flight item, then exit
    signal.signal(signal.SIGTERM, lambda *_: worker.stop())
    worker.run_forever()
