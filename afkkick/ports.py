from __future__ import annotations

from typing import Protocol

from afkkick.api.models import Player


class Roster(Protocol):
    """Read-only view of the server population.

    `None` from any query means the data is currently unavailable.
    """

    def get_players(self) -> list[Player] | None:  # pragma: no cover
        ...

    def get_admins(self, scope: str) -> set[str] | None:  # pragma: no cover
        ...

    def get_player_by_eos_id(self, eos_id: str) -> Player | None:  # pragma: no cover
        ...


class AdminActions(Protocol):
    """Fire-and-forget admin commands against a player."""

    def kick(self, steam_id: str, reason: str) -> None:  # pragma: no cover
        ...

    def warn(self, steam_id: str, message: str) -> None:  # pragma: no cover
        ...
