from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from statemachine import State, StateMachine

from afkkick.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)


class RoundPhase(StrEnum):
    in_round = "in_round"
    between_rounds = "between_rounds"


class RoundPhaseMachine(StateMachine):
    """in_round -> between_rounds on a new round, back after the grace period."""

    in_round = State(RoundPhase.in_round.value, value=RoundPhase.in_round.value, initial=True)
    between_rounds = State(RoundPhase.between_rounds.value, value=RoundPhase.between_rounds.value)

    new_round = in_round.to(between_rounds) | between_rounds.to.itself()
    grace_expired = between_rounds.to(in_round)


class RoundPhaseGate:
    """Suppresses tracking for `grace_period_ms` after each new round.

    Grace expiry only flips the phase back; the next periodic or event-driven
    reconcile picks tracking up again.
    """

    def __init__(
        self,
        *,
        timers: TimerService,
        grace_period_ms: int,
        reconcile: Callable[[], object] | None = None,
    ) -> None:
        self._timers = timers
        self._grace_period_ms = grace_period_ms
        self._machine = RoundPhaseMachine()
        self._grace_timer: TimerHandle | None = None
        self.reconcile = reconcile

    @property
    def phase(self) -> RoundPhase:
        return RoundPhase(str(self._machine.current_state.value))

    @property
    def between_rounds(self) -> bool:
        return self.phase == RoundPhase.between_rounds

    def on_new_round(self) -> None:
        self._machine.new_round()
        logger.info("New round: tracking suppressed for %sms", self._grace_period_ms)

        if self.reconcile is not None:
            self.reconcile()

        # A second new round restarts the grace window instead of stacking timers.
        if self._grace_timer is not None:
            self._grace_timer.cancel()
        self._grace_timer = self._timers.call_later(self._grace_period_ms, self._on_grace_expired)

    def _on_grace_expired(self) -> None:
        self._grace_timer = None
        if self.between_rounds:
            self._machine.grace_expired()
            logger.info("Grace period over: tracking re-enabled")

    def stop(self) -> None:
        if self._grace_timer is not None:
            self._grace_timer.cancel()
            self._grace_timer = None
