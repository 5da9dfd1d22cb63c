from __future__ import annotations

import logging
from collections.abc import Iterable

import redis
from pydantic import TypeAdapter, ValidationError

from afkkick.api.models import Player

logger = logging.getLogger(__name__)

PLAYERS_KEY = "afkkick:players"
ADMINS_KEY_PREFIX = "afkkick:admins:"  # + {scope}

_players_adapter = TypeAdapter(list[Player])


def _admins_key(scope: str) -> str:
    return f"{ADMINS_KEY_PREFIX}{scope}"


def save_players(*, r: redis.Redis, players: Iterable[Player]) -> None:
    """Replace the published player list.

    Dev/test helper: in production the external server poller owns this key.
    """

    r.set(PLAYERS_KEY, _players_adapter.dump_json(list(players)))


def set_admins(*, r: redis.Redis, scope: str, steam_ids: Iterable[str]) -> None:
    """Replace the admin set for `scope`. Dev/test helper, like `save_players`."""

    key = _admins_key(scope)
    ids = list(steam_ids)
    pipe = r.pipeline()
    pipe.delete(key)
    if ids:
        pipe.sadd(key, *ids)
    pipe.execute()


class RedisRoster:
    """Roster backed by Redis keys the server poller keeps up to date.

    Every call reads fresh. A Redis or decoding failure is reported as `None`
    (snapshot unavailable); a missing player list is also `None`, while a
    missing admin set is an empty set.
    """

    def __init__(self, *, r: redis.Redis) -> None:
        self._r = r

    def get_players(self) -> list[Player] | None:
        try:
            raw = self._r.get(PLAYERS_KEY)
        except redis.RedisError:
            logger.exception("Player list unavailable")
            return None
        if not raw:
            return None
        try:
            return _players_adapter.validate_json(raw)
        except ValidationError:
            logger.exception("Player list is malformed")
            return None

    def get_admins(self, scope: str) -> set[str] | None:
        key = _admins_key(scope)
        try:
            # A missing set means "no admins configured"; only a failed query is None.
            return {str(m) for m in self._r.smembers(key)}
        except redis.RedisError:
            logger.exception("Admin list unavailable for scope=%s", scope)
            return None

    def get_player_by_eos_id(self, eos_id: str) -> Player | None:
        players = self.get_players()
        if not players:
            return None
        return next((p for p in players if p.eos_id == eos_id), None)
