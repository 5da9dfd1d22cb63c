from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

EventType = Literal[
    "new_game",
    "player_disconnected",
    "player_squad_changed",
]


@dataclass(frozen=True, slots=True)
class NewRound:
    type: EventType = "new_game"


@dataclass(frozen=True, slots=True)
class PlayerDisconnected:
    eos_id: str
    type: EventType = "player_disconnected"


@dataclass(frozen=True, slots=True)
class SquadChanged:
    steam_id: str
    squad_id: str | None
    type: EventType = "player_squad_changed"


ServerEvent = NewRound | PlayerDisconnected | SquadChanged


def _none_if_blank(value: object) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def decode_event(fields: Mapping[str, object]) -> ServerEvent:
    """Decode a flat stream entry / JSON body into a server event.

    Stream entries can only carry strings, so an empty `squad_id` means
    "no squad".
    """

    msg_type = fields.get("type")

    if msg_type == "new_game":
        return NewRound()

    if msg_type == "player_disconnected":
        eos_id = _none_if_blank(fields.get("eos_id"))
        if eos_id is None:
            raise ValueError("eos_id is required")
        return PlayerDisconnected(eos_id=eos_id)

    if msg_type == "player_squad_changed":
        steam_id = _none_if_blank(fields.get("steam_id"))
        if steam_id is None:
            raise ValueError("steam_id is required")
        return SquadChanged(steam_id=steam_id, squad_id=_none_if_blank(fields.get("squad_id")))

    raise ValueError(f"Unknown event type: {msg_type}")
