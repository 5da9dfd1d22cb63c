from __future__ import annotations

import os

import redis


def get_redis_url() -> str:
    # AFKKICK_REDIS_URL wins so the service can share a host with other REDIS_URL users.
    return os.environ.get("AFKKICK_REDIS_URL") or os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis(url: str | None = None) -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(url or get_redis_url(), decode_responses=True, health_check_interval=30)
