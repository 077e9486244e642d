# csv_parser_service/queueing/redis_conn.py
from functools import lru_cache

from redis import Redis

from csv_parser_service.config import load_queue_config


@lru_cache(maxsize=1)
def get_redis(url: str | None = None) -> Redis:
    url = url or load_queue_config().redis_url
    # Queue items are raw JSON bytes; do NOT enable decode_responses.
    return Redis.from_url(url, decode_responses=False)
