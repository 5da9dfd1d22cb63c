from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from afkkick.api.models import Player
from afkkick.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class UntrackReason(StrEnum):
    list_cleared = "list cleared"
    joined_group = "joined a group"
    disconnected = "actor disconnected"
    kicked = "removed for inactivity"


@dataclass(slots=True)
class TrackingRecord:
    """Escalation state for one unassigned player.

    `snapshot` is the player as seen at track time and is only used for
    messaging; it is never re-validated.
    """

    snapshot: Player
    started_at_ms: float
    warnings: int = 0
    warn_timer: TimerHandle | None = None
    kick_timer: TimerHandle | None = None

    @property
    def steam_id(self) -> str:
        return self.snapshot.steam_id

    @property
    def name(self) -> str:
        return self.snapshot.name

    def cancel_timers(self) -> None:
        for handle in (self.warn_timer, self.kick_timer):
            if handle is not None:
                handle.cancel()


ArmTimers = Callable[[TrackingRecord], None]


class TrackingRegistry:
    """Authoritative steam_id -> TrackingRecord map.

    Contract:
      - `track()` creates at most one record per steam_id and arms its timers.
      - `untrack()` removes the record *before* cancelling its timers, so a
        callback racing in already sees the player as untracked.
      - Both are safe to call from inside a firing timer callback.
    """

    def __init__(self, *, timers: TimerService, arm: ArmTimers | None = None) -> None:
        self._timers = timers
        self._records: dict[str, TrackingRecord] = {}
        self.arm = arm

    def __contains__(self, steam_id: object) -> bool:
        return steam_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def is_tracked(self, steam_id: str) -> bool:
        return steam_id in self._records

    def tracked_ids(self) -> set[str]:
        return set(self._records)

    def get(self, steam_id: str) -> TrackingRecord | None:
        return self._records.get(steam_id)

    def records(self) -> list[TrackingRecord]:
        return list(self._records.values())

    def track(self, player: Player) -> TrackingRecord:
        existing = self._records.get(player.steam_id)
        if existing is not None:
            return existing

        if self.arm is None:
            raise RuntimeError("TrackingRegistry has no escalation bound. Set `arm` before tracking.")

        record = TrackingRecord(snapshot=player, started_at_ms=self._timers.now_ms())
        self._records[player.steam_id] = record
        try:
            self.arm(record)
        except Exception:
            # Never leave a record behind without its timer pair.
            self._records.pop(player.steam_id, None)
            record.cancel_timers()
            raise

        logger.info("Tracking: name=%s steam_id=%s", player.name, player.steam_id)
        return record

    def untrack(self, steam_id: str, reason: UntrackReason | str | None = None) -> bool:
        record = self._records.pop(steam_id, None)
        if record is None:
            return False

        record.cancel_timers()
        logger.info("Untracked: name=%s reason=%s", record.name, reason or "null")
        return True

    def clear(self, reason: UntrackReason | str = UntrackReason.list_cleared) -> list[str]:
        removed: list[str] = []
        for steam_id in list(self._records):
            if self.untrack(steam_id, reason):
                removed.append(steam_id)
        return removed
