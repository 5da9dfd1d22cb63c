from __future__ import annotations

import logging

from afkkick.core.events import NewRound, PlayerDisconnected, ServerEvent, SquadChanged
from afkkick.ports import Roster
from afkkick.registry import TrackingRegistry, UntrackReason
from afkkick.round_phase import RoundPhaseGate

logger = logging.getLogger(__name__)


class EventAdapter:
    """Routes decoded server events to the round-phase gate and the registry.

    Only a new round triggers a reconcile (through the gate). Disconnects and
    squad changes untrack directly, since the roster may still lag the event.
    """

    def __init__(
        self,
        *,
        roster: Roster,
        registry: TrackingRegistry,
        gate: RoundPhaseGate,
    ) -> None:
        self._roster = roster
        self._registry = registry
        self._gate = gate

    def handle(self, event: ServerEvent) -> None:
        if isinstance(event, NewRound):
            self.on_new_round()
        elif isinstance(event, PlayerDisconnected):
            self.on_player_disconnected(event.eos_id)
        elif isinstance(event, SquadChanged):
            self.on_squad_changed(event.steam_id, event.squad_id)
        else:
            raise ValueError(f"Unsupported event: {event!r}")

    def on_new_round(self) -> None:
        self._gate.on_new_round()

    def on_player_disconnected(self, eos_id: str) -> bool:
        player = self._roster.get_player_by_eos_id(eos_id)
        if player is None:
            logger.debug("Disconnect for unknown eos_id=%s ignored", eos_id)
            return False
        return self._registry.untrack(player.steam_id, UntrackReason.disconnected)

    def on_squad_changed(self, steam_id: str, squad_id: str | None) -> bool:
        if squad_id is None:
            return False
        return self._registry.untrack(steam_id, UntrackReason.joined_group)
