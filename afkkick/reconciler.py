from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from afkkick.config import AfkKickConfig
from afkkick.ports import Roster
from afkkick.registry import TrackingRegistry, UntrackReason
from afkkick.round_phase import RoundPhaseGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of one reconcile pass.

    - `skipped`: the population snapshot was unavailable; nothing changed.
    - `enabled`: tracking was allowed this pass (not between rounds, enough players).
    """

    skipped: bool
    enabled: bool
    tracked: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)
    checked_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


class Reconciler:
    """Brings the registry in line with a fresh roster snapshot.

    The sweep only moves forward from the population: a tracked player missing
    from the snapshot is left alone (disconnect events clean those up).
    """

    def __init__(
        self,
        *,
        config: AfkKickConfig,
        roster: Roster,
        registry: TrackingRegistry,
        gate: RoundPhaseGate,
    ) -> None:
        self._config = config
        self._roster = roster
        self._registry = registry
        self._gate = gate

    def reconcile(self) -> ReconcileResult:
        admins = self._roster.get_admins(self._config.admin_scope)
        players = self._roster.get_players()

        # Without the admin list we could track (and later kick) an admin.
        if admins is None:
            logger.info("Update Tracking List skipped: admin list unavailable")
            return ReconcileResult(skipped=True, enabled=False)

        # An empty list is how a failed roster query looks; treat it the same as None.
        if not players:
            logger.info("Update Tracking List skipped: player list unavailable")
            return ReconcileResult(skipped=True, enabled=False)

        between_rounds = self._gate.between_rounds
        below_threshold = len(players) < self._config.min_players_for_afk_kick
        enabled = not (between_rounds or below_threshold)
        logger.info(
            "Update Tracking List? %s (Between rounds: %s, Below player threshold: %s)",
            enabled,
            between_rounds,
            below_threshold,
        )

        if not enabled:
            untracked = self._registry.clear(UntrackReason.list_cleared)
            return ReconcileResult(skipped=False, enabled=False, untracked=untracked)

        tracked: list[str] = []
        untracked = []
        for player in players:
            is_tracked = self._registry.is_tracked(player.steam_id)

            if not player.is_unassigned:
                if is_tracked and self._registry.untrack(player.steam_id, UntrackReason.joined_group):
                    untracked.append(player.steam_id)
                continue

            if player.steam_id in admins:
                logger.info("Admin is Unassigned: %s", player.name)
                continue

            if not is_tracked:
                self._registry.track(player)
                tracked.append(player.steam_id)

        return ReconcileResult(skipped=False, enabled=True, tracked=tracked, untracked=untracked)
