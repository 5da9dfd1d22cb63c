from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Player(BaseModel):
    """A connected player as reported by the server roster."""

    model_config = ConfigDict(frozen=True)

    steam_id: str = Field(..., min_length=1)
    eos_id: str = ""
    name: str = ""
    team_id: str | None = None

    # None means the player is not in a squad ("unassigned").
    squad_id: str | None = None

    role: str | None = None
    is_leader: bool = False

    @property
    def is_unassigned(self) -> bool:
        return self.squad_id is None


class TrackedPlayer(BaseModel):
    steam_id: str
    eos_id: str
    name: str
    team_id: str | None = None
    warnings: int
    started_at_ms: float
    tracked_for_ms: float


class TrackedListResponse(BaseModel):
    players: list[TrackedPlayer]


class StatusResponse(BaseModel):
    between_rounds: bool
    tracked: int
    min_players_for_afk_kick: int
    kick_timeout_ms: int
    warning_interval_ms: int
    grace_period_ms: int
    tracking_list_update_frequency_ms: int
    admin_scope: str


class ReconcileResponse(BaseModel):
    skipped: bool
    enabled: bool
    tracked: list[str] = Field(default_factory=list)
    untracked: list[str] = Field(default_factory=list)
    checked_at: datetime


class EventAcceptedResponse(BaseModel):
    type: str
    tracked: int
