# csv_parser_service/main.py
"""
Process entry point.

  DEV_MODE=true (or no AWS_REGION)  -> HTTP parse endpoints
  otherwise                         -> SQS/SNS worker thread + /health

Usage:
  python -m csv_parser_service.main
"""

from __future__ import annotations

import logging
import sys

import uvicorn

from csv_parser_service.api.app import create_app
from csv_parser_service.config import load_settings
from csv_parser_service.queueing.worker import build_worker, start_in_background

log = logging.getLogger(__name__)


def main() -> None:
    cfg = load_settings()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )

    if cfg.is_development:
        log.info("Starting CSV Parser Service in DEVELOPMENT mode (HTTP endpoints)")
    else:
        log.info("Starting CSV Parser Service in PRODUCTION mode (SQS/SNS)")
        start_in_background(build_worker(cfg))

    log.info("Starting CSV Parser Service on port %s", cfg.port)
    uvicorn.run(create_app(cfg), host="0.0.0.0", port=cfg.port)


if __name__ == "__main__":
    main()
