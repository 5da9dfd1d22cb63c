from __future__ import annotations

from collections.abc import Mapping
from typing import cast

import redis

# Inbound: game server log events (new round, disconnects, squad changes).
SERVER_EVENTS_STREAM = "afkkick:server:events"
# Outbound: admin commands for the RCON side to execute.
ADMIN_COMMANDS_STREAM = "afkkick:admin:commands"


def publish(*, r: redis.Redis, stream_key: str, fields: Mapping[str, object]) -> str:
    """Append an entry to a stream."""

    # redis-py stubs expect field/value unions; in our app we only use string fields/values.
    stream_id = r.xadd(stream_key, {str(k): "" if v is None else str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def publish_server_event(*, r: redis.Redis, fields: Mapping[str, object]) -> str:
    """Dev/test helper: the game server log reader is the real producer."""

    return publish(r=r, stream_key=SERVER_EVENTS_STREAM, fields=fields)
