from __future__ import annotations

import logging

from afkkick.config import AfkKickConfig
from afkkick.core.events import ServerEvent
from afkkick.escalation import EscalationController
from afkkick.event_adapter import EventAdapter
from afkkick.ports import AdminActions, Roster
from afkkick.reconciler import Reconciler, ReconcileResult
from afkkick.registry import TrackingRegistry, UntrackReason
from afkkick.round_phase import RoundPhaseGate
from afkkick.timers import AsyncioTimerService, TimerHandle, TimerService

logger = logging.getLogger(__name__)


class AutoKickUnassigned:
    """Kicks players who stay out of a squad for too long.

    Wires the registry, escalation, reconciler, round-phase gate and event
    adapter together. Nothing here is global: build one per server.
    """

    def __init__(
        self,
        *,
        config: AfkKickConfig,
        roster: Roster,
        admin: AdminActions,
        timers: TimerService | None = None,
    ) -> None:
        self.config = config
        self.timers: TimerService = timers or AsyncioTimerService()

        self.registry = TrackingRegistry(timers=self.timers)
        self.gate = RoundPhaseGate(timers=self.timers, grace_period_ms=config.grace_period_ms)
        self.reconciler = Reconciler(config=config, roster=roster, registry=self.registry, gate=self.gate)
        self.escalation = EscalationController(
            config=config,
            timers=self.timers,
            admin=admin,
            registry=self.registry,
            reconcile=self.reconcile,
        )
        self.events = EventAdapter(roster=roster, registry=self.registry, gate=self.gate)

        self.registry.arm = self.escalation.arm
        self.gate.reconcile = self.reconcile

        self._tick: TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._tick is not None and self._tick.active

    def reconcile(self) -> ReconcileResult:
        return self.reconciler.reconcile()

    def handle_event(self, event: ServerEvent) -> None:
        self.events.handle(event)

    def start(self) -> None:
        if self.running:
            return
        self._tick = self.timers.call_repeating(self.config.tracking_list_update_frequency_ms, self.reconcile)
        logger.info(
            "AFK kick started (min players %s, kick after %sms, warn every %sms)",
            self.config.min_players_for_afk_kick,
            self.config.kick_timeout_ms,
            self.config.warning_interval_ms,
        )

    def stop(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None
        self.gate.stop()
        self.registry.clear(UntrackReason.list_cleared)
        logger.info("AFK kick stopped")
