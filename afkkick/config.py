from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

ENV_PREFIX = "AFKKICK_"


@dataclass(frozen=True, slots=True)
class AfkKickConfig:
    # Population floor; below it nobody is tracked.
    min_players_for_afk_kick: int = 40
    # Time from tracking start until the kick.
    kick_timeout_ms: int = 600_000
    # Time between successive warnings.
    warning_interval_ms: int = 120_000
    # Tracking stays suppressed this long after a new round starts.
    grace_period_ms: int = 900_000
    # Periodic reconcile tick.
    tracking_list_update_frequency_ms: int = 60_000
    # Admin permission that exempts a player from tracking.
    admin_scope: str = "cameraman"

    def __post_init__(self) -> None:
        if self.min_players_for_afk_kick < 0:
            raise ValueError("min_players_for_afk_kick must be >= 0")
        for name in ("kick_timeout_ms", "warning_interval_ms", "tracking_list_update_frequency_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        if self.grace_period_ms < 0:
            raise ValueError("grace_period_ms must be >= 0")
        if not self.admin_scope:
            raise ValueError("admin_scope must not be empty")


def load_dotenv_if_present(path: Path | None = None) -> None:
    """Load a `.env` file into the process environment without overriding it."""

    env_path = path or Path.cwd() / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


def config_from_env(environ: dict[str, str] | None = None) -> AfkKickConfig:
    """Build the config from `AFKKICK_*` variables, e.g. `AFKKICK_KICK_TIMEOUT_MS`.

    Unset variables keep their defaults; malformed integers raise ValueError.
    """

    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    for f in fields(AfkKickConfig):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        if f.name == "admin_scope":
            values[f.name] = raw
        else:
            try:
                values[f.name] = int(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}") from e
    return AfkKickConfig(**values)  # type: ignore[arg-type]
