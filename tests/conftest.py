from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable, Generator

import pytest

from afkkick.api.models import Player
from afkkick.config import AfkKickConfig
from afkkick.plugin import AutoKickUnassigned


class ManualTimerHandle:
    def __init__(self) -> None:
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        self._done = True


class ManualTimerService:
    """Deterministic TimerService: time only moves on `advance()`.

    Timers due at the same instant fire in scheduling order. Callback errors
    propagate so tests see them.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, ManualTimerHandle, Callable[[], None], float | None]] = []

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle()
        heapq.heappush(self._queue, (self._now + delay_ms, next(self._seq), handle, callback, None))
        return handle

    def call_repeating(self, interval_ms: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle()
        heapq.heappush(self._queue, (self._now + interval_ms, next(self._seq), handle, callback, interval_ms))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, h, _, _ in self._queue if h.active)

    def advance(self, ms: float) -> None:
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback, interval = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = due
            if interval is None:
                handle._done = True
            else:
                heapq.heappush(self._queue, (due + interval, next(self._seq), handle, callback, interval))
            callback()
        self._now = target

    def advance_to(self, at_ms: float) -> None:
        self.advance(at_ms - self._now)


class FakeRoster:
    def __init__(self) -> None:
        self.players: list[Player] | None = []
        self.admins: dict[str, set[str]] = {}
        # Simulates a failed admin query.
        self.admins_unavailable = False

    def get_players(self) -> list[Player] | None:
        return None if self.players is None else list(self.players)

    def get_admins(self, scope: str) -> set[str] | None:
        if self.admins_unavailable:
            return None
        return set(self.admins.get(scope, set()))

    def get_player_by_eos_id(self, eos_id: str) -> Player | None:
        return next((p for p in self.players or [] if p.eos_id == eos_id), None)

    def set_squad(self, steam_id: str, squad_id: str | None) -> None:
        assert self.players is not None
        self.players = [p.model_copy(update={"squad_id": squad_id}) if p.steam_id == steam_id else p for p in self.players]

    def remove(self, steam_id: str) -> None:
        assert self.players is not None
        self.players = [p for p in self.players if p.steam_id != steam_id]


class FakeAdmin:
    def __init__(self, timers: ManualTimerService) -> None:
        self._timers = timers
        self.kicks: list[tuple[float, str, str]] = []
        self.warnings: list[tuple[float, str, str]] = []

    def kick(self, steam_id: str, reason: str) -> None:
        self.kicks.append((self._timers.now_ms(), steam_id, reason))

    def warn(self, steam_id: str, message: str) -> None:
        self.warnings.append((self._timers.now_ms(), steam_id, message))

    def warnings_for(self, steam_id: str) -> list[tuple[float, str]]:
        return [(at, msg) for at, sid, msg in self.warnings if sid == steam_id]


def _make_player(idx: int, *, squad_id: str | None = "1", name: str | None = None) -> Player:
    return Player(
        steam_id=f"7656119800000{idx:04d}",
        eos_id=f"eos{idx:04d}",
        name=name or f"player{idx}",
        team_id="1",
        squad_id=squad_id,
    )


@pytest.fixture()
def make_player() -> Callable[..., Player]:
    return _make_player


@pytest.fixture()
def config() -> AfkKickConfig:
    return AfkKickConfig(
        min_players_for_afk_kick=3,
        kick_timeout_ms=600_000,
        warning_interval_ms=120_000,
        grace_period_ms=900_000,
        tracking_list_update_frequency_ms=60_000,
        admin_scope="cameraman",
    )


@pytest.fixture()
def timers() -> ManualTimerService:
    return ManualTimerService()


@pytest.fixture()
def roster() -> FakeRoster:
    r = FakeRoster()
    # Three squadded players: at the population floor, nobody to track yet.
    r.players = [_make_player(i) for i in range(1, 4)]
    return r


@pytest.fixture()
def admin(timers: ManualTimerService) -> FakeAdmin:
    return FakeAdmin(timers)


@pytest.fixture()
def plugin(
    config: AfkKickConfig,
    roster: FakeRoster,
    admin: FakeAdmin,
    timers: ManualTimerService,
) -> Generator[AutoKickUnassigned, None, None]:
    p = AutoKickUnassigned(config=config, roster=roster, admin=admin, timers=timers)
    yield p
    p.stop()
