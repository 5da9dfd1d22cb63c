from __future__ import annotations

import logging
from collections.abc import Callable

from afkkick.config import AfkKickConfig
from afkkick.ports import AdminActions
from afkkick.registry import TrackingRecord, TrackingRegistry, UntrackReason
from afkkick.timers import TimerService

logger = logging.getLogger(__name__)

KICK_REASON = "AFK"
WARNING_TEMPLATE = "Join a squad or you will be kicked in - {time_left}"


def format_ms(ms: float) -> str:
    """Format a duration as MM:SS, flooring (never rounding). Negative clamps to 00:00."""

    total_seconds = max(int(ms // 1000), 0)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


class EscalationController:
    """Owns the warning and kick timers of every tracked player.

    Warning timer: repeats every `warning_interval_ms` and stops itself once the
    remaining time drops below one interval.
    Kick timer: fires once after `kick_timeout_ms`, reconciles, then kicks only
    if the player is still tracked.
    """

    def __init__(
        self,
        *,
        config: AfkKickConfig,
        timers: TimerService,
        admin: AdminActions,
        registry: TrackingRegistry,
        reconcile: Callable[[], object] | None = None,
    ) -> None:
        self._config = config
        self._timers = timers
        self._admin = admin
        self._registry = registry
        self.reconcile = reconcile

    def arm(self, record: TrackingRecord) -> None:
        record.warn_timer = self._timers.call_repeating(
            self._config.warning_interval_ms, lambda: self._on_warn(record)
        )
        record.kick_timer = self._timers.call_later(self._config.kick_timeout_ms, lambda: self._on_kick(record))

    def _is_current(self, record: TrackingRecord) -> bool:
        # Identity check: a re-tracked player gets a fresh record.
        return self._registry.get(record.steam_id) is record

    def _on_warn(self, record: TrackingRecord) -> None:
        if not self._is_current(record):
            if record.warn_timer is not None:
                record.warn_timer.cancel()
            return

        cfg = self._config
        ms_left = cfg.kick_timeout_ms - cfg.warning_interval_ms * (record.warnings + 1)

        # Last warning before the kick.
        if ms_left < cfg.warning_interval_ms + 1 and record.warn_timer is not None:
            record.warn_timer.cancel()

        time_left = format_ms(ms_left)
        self._admin.warn(record.steam_id, WARNING_TEMPLATE.format(time_left=time_left))
        logger.info("Warning: %s (%s)", record.name, time_left)
        record.warnings += 1

    def _on_kick(self, record: TrackingRecord) -> None:
        # Catch a squad join that arrived without its own event.
        if self.reconcile is not None:
            self.reconcile()

        if not self._is_current(record):
            return

        self._admin.kick(record.steam_id, KICK_REASON)
        logger.info("Kicked: %s", record.name)
        self._registry.untrack(record.steam_id, UntrackReason.kicked)
