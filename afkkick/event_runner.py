from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass

import redis

from afkkick.core.events import decode_event
from afkkick.plugin import AutoKickUnassigned
from afkkick.streams import SERVER_EVENTS_STREAM

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventRunnerConfig:
    # How long to block waiting for server events (0 = don't block).
    block_ms: int = 1_000
    # Max entries to read per iteration.
    count: int = 50
    group: str = "afkkick"
    consumer: str = "afkkick-1"
    stream_key: str = SERVER_EVENTS_STREAM


def ensure_events_group(*, r: redis.Redis, stream_key: str, group: str) -> None:
    """Ensure a consumer group exists for the given stream.

    Uses MKSTREAM so missing streams are created. The group starts at "$":
    events from before startup describe a game state we never observed.
    """

    try:
        r.xgroup_create(stream_key, group, id="$", mkstream=True)
    except redis.ResponseError as e:
        # BUSYGROUP is expected if it already exists.
        if "BUSYGROUP" not in str(e):
            raise


def handle_event_entry(*, plugin: AutoKickUnassigned, fields: Mapping[str, str]) -> bool:
    """Decode and apply a single stream entry.

    Returns True if it was a known event.
    """

    try:
        event = decode_event(fields)
    except ValueError as e:
        logger.warning("Ignoring server event %s: %s", dict(fields), e)
        return False

    plugin.handle_event(event)
    return True


def read_events(*, r: redis.Redis, config: EventRunnerConfig) -> list[tuple[str, dict[str, str]]]:
    # redis treats block=0 as "forever"; None means return immediately.
    resp = r.xreadgroup(
        config.group,
        config.consumer,
        {config.stream_key: ">"},
        count=config.count,
        block=config.block_ms or None,
    )
    entries: list[tuple[str, dict[str, str]]] = []
    for _stream, messages in resp or []:
        entries.extend(messages)
    return entries


async def run_events_once(
    *,
    r: redis.Redis,
    plugin: AutoKickUnassigned,
    config: EventRunnerConfig | None = None,
) -> int:
    """Read one batch of server events and apply them to the plugin.

    The blocking read runs in a worker thread; events are applied back on the
    event loop so they serialize with timer callbacks.

    Returns how many known events were applied.
    """

    cfg = config or EventRunnerConfig()
    ensure_events_group(r=r, stream_key=cfg.stream_key, group=cfg.group)

    entries = await asyncio.to_thread(read_events, r=r, config=cfg)

    applied = 0
    for msg_id, fields in entries:
        try:
            if handle_event_entry(plugin=plugin, fields=fields):
                applied += 1
        except Exception:
            # One bad event must not stop the consumer.
            logger.exception("Failed to apply server event %s", msg_id)
        # Ack regardless; a malformed event won't get better on retry.
        r.xack(cfg.stream_key, cfg.group, msg_id)
    return applied


async def run_event_loop(
    *,
    r: redis.Redis,
    plugin: AutoKickUnassigned,
    config: EventRunnerConfig | None = None,
    retry_delay_s: float = 5.0,
) -> None:
    """Consume server events until cancelled. Redis errors back off and retry."""

    cfg = config or EventRunnerConfig()
    while True:
        try:
            await run_events_once(r=r, plugin=plugin, config=cfg)
        except redis.RedisError:
            logger.exception("Server event stream unavailable; retrying in %ss", retry_delay_s)
            await asyncio.sleep(retry_delay_s)
