from __future__ import annotations

import logging
from datetime import UTC, datetime

import redis

from afkkick.streams import ADMIN_COMMANDS_STREAM, publish

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class RedisAdminActions:
    """AdminActions that enqueue `kick` / `warn` commands on a Redis stream.

    Fire-and-forget: the RCON worker consuming the stream executes them.
    A failed publish is logged and dropped.
    """

    def __init__(self, *, r: redis.Redis, stream_key: str = ADMIN_COMMANDS_STREAM) -> None:
        self._r = r
        self._stream_key = stream_key

    def _send(self, fields: dict[str, str]) -> None:
        try:
            publish(r=self._r, stream_key=self._stream_key, fields=fields)
        except redis.RedisError:
            logger.exception("Failed to publish admin command %s", fields.get("command"))

    def kick(self, steam_id: str, reason: str) -> None:
        self._send({"command": "kick", "steam_id": steam_id, "reason": reason, "ts": _now_iso()})

    def warn(self, steam_id: str, message: str) -> None:
        self._send({"command": "warn", "steam_id": steam_id, "message": message, "ts": _now_iso()})
