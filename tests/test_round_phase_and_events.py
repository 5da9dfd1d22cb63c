from __future__ import annotations

import pytest

from afkkick.core.events import NewRound, PlayerDisconnected, SquadChanged, decode_event
from afkkick.plugin import AutoKickUnassigned
from afkkick.round_phase import RoundPhase, RoundPhaseGate


def test_gate_starts_in_round(timers) -> None:
    gate = RoundPhaseGate(timers=timers, grace_period_ms=1_000)
    assert gate.phase == RoundPhase.in_round
    assert gate.between_rounds is False


def test_new_round_reconciles_immediately_then_expires(timers) -> None:
    calls: list[bool] = []
    gate = RoundPhaseGate(timers=timers, grace_period_ms=1_000)
    gate.reconcile = lambda: calls.append(gate.between_rounds)

    gate.on_new_round()
    # The reconcile already sees the gate closed.
    assert calls == [True]

    timers.advance(999)
    assert gate.between_rounds is True
    timers.advance(1)
    assert gate.between_rounds is False
    # Expiry does not trigger a reconcile of its own.
    assert calls == [True]


def test_second_new_round_restarts_grace_window(timers) -> None:
    gate = RoundPhaseGate(timers=timers, grace_period_ms=1_000)

    gate.on_new_round()
    timers.advance(800)
    gate.on_new_round()

    timers.advance(500)
    assert gate.between_rounds is True
    timers.advance(500)
    assert gate.between_rounds is False
    assert timers.pending() == 0


def test_stop_cancels_grace_timer(timers) -> None:
    gate = RoundPhaseGate(timers=timers, grace_period_ms=1_000)
    gate.on_new_round()
    gate.stop()
    assert timers.pending() == 0


def test_decode_event_types() -> None:
    assert decode_event({"type": "new_game"}) == NewRound()
    assert decode_event({"type": "player_disconnected", "eos_id": "e1"}) == PlayerDisconnected(eos_id="e1")
    assert decode_event({"type": "player_squad_changed", "steam_id": "s1", "squad_id": "3"}) == SquadChanged(
        steam_id="s1", squad_id="3"
    )
    # Streams carry strings only: blank squad means "no squad".
    assert decode_event({"type": "player_squad_changed", "steam_id": "s1", "squad_id": ""}) == SquadChanged(
        steam_id="s1", squad_id=None
    )
    assert decode_event({"type": "player_squad_changed", "steam_id": "s1"}).squad_id is None


@pytest.mark.parametrize(
    "fields",
    [
        {},
        {"type": "round_ended"},
        {"type": "player_disconnected"},
        {"type": "player_squad_changed", "squad_id": "1"},
    ],
)
def test_decode_event_rejects_bad_entries(fields: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        decode_event(fields)


def test_new_round_event_clears_tracking(plugin: AutoKickUnassigned, roster, make_player) -> None:
    roster.players.append(make_player(10, squad_id=None))
    plugin.reconcile()
    assert len(plugin.registry) == 1

    plugin.handle_event(NewRound())

    assert plugin.gate.between_rounds is True
    assert len(plugin.registry) == 0


def test_disconnect_event_untracks(plugin: AutoKickUnassigned, roster, make_player) -> None:
    p = make_player(10, squad_id=None)
    roster.players.append(p)
    plugin.reconcile()

    plugin.handle_event(PlayerDisconnected(eos_id=p.eos_id))

    assert not plugin.registry.is_tracked(p.steam_id)


def test_disconnect_for_unknown_player_does_nothing(plugin: AutoKickUnassigned, roster, make_player) -> None:
    p = make_player(10, squad_id=None)
    roster.players.append(p)
    plugin.reconcile()

    plugin.handle_event(PlayerDisconnected(eos_id="not-on-server"))

    assert plugin.registry.is_tracked(p.steam_id)


def test_squad_changed_event_untracks_only_when_joining(plugin: AutoKickUnassigned, roster, make_player) -> None:
    p = make_player(10, squad_id=None)
    roster.players.append(p)
    plugin.reconcile()

    assert plugin.events.on_squad_changed(p.steam_id, None) is False
    assert plugin.registry.is_tracked(p.steam_id)

    plugin.handle_event(SquadChanged(steam_id=p.steam_id, squad_id="2"))
    assert not plugin.registry.is_tracked(p.steam_id)


def test_squad_changed_for_untracked_player_is_a_no_op(plugin: AutoKickUnassigned) -> None:
    assert plugin.events.on_squad_changed("someone", "1") is False
