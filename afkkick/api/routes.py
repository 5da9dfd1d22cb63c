from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from afkkick.api.deps import get_plugin
from afkkick.api.models import (
    EventAcceptedResponse,
    ReconcileResponse,
    StatusResponse,
    TrackedListResponse,
    TrackedPlayer,
)
from afkkick.core.events import decode_event
from afkkick.plugin import AutoKickUnassigned
from afkkick.registry import TrackingRecord

router = APIRouter()


def _tracked_view(*, record: TrackingRecord, now_ms: float) -> TrackedPlayer:
    p = record.snapshot
    return TrackedPlayer(
        steam_id=p.steam_id,
        eos_id=p.eos_id,
        name=p.name,
        team_id=p.team_id,
        warnings=record.warnings,
        started_at_ms=record.started_at_ms,
        tracked_for_ms=max(now_ms - record.started_at_ms, 0.0),
    )


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/afk/status", response_model=StatusResponse)
async def status_route(plugin: AutoKickUnassigned = Depends(get_plugin)) -> StatusResponse:
    cfg = plugin.config
    return StatusResponse(
        between_rounds=plugin.gate.between_rounds,
        tracked=len(plugin.registry),
        min_players_for_afk_kick=cfg.min_players_for_afk_kick,
        kick_timeout_ms=cfg.kick_timeout_ms,
        warning_interval_ms=cfg.warning_interval_ms,
        grace_period_ms=cfg.grace_period_ms,
        tracking_list_update_frequency_ms=cfg.tracking_list_update_frequency_ms,
        admin_scope=cfg.admin_scope,
    )


@router.get("/afk/tracked", response_model=TrackedListResponse)
async def list_tracked_route(plugin: AutoKickUnassigned = Depends(get_plugin)) -> TrackedListResponse:
    now_ms = plugin.timers.now_ms()
    records = sorted(plugin.registry.records(), key=lambda rec: rec.started_at_ms)
    return TrackedListResponse(players=[_tracked_view(record=rec, now_ms=now_ms) for rec in records])


@router.get("/afk/tracked/{steam_id}", response_model=TrackedPlayer)
async def get_tracked_route(steam_id: str, plugin: AutoKickUnassigned = Depends(get_plugin)) -> TrackedPlayer:
    record = plugin.registry.get(steam_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not tracked")
    return _tracked_view(record=record, now_ms=plugin.timers.now_ms())


@router.post("/afk/reconcile", response_model=ReconcileResponse)
async def reconcile_route(plugin: AutoKickUnassigned = Depends(get_plugin)) -> ReconcileResponse:
    result = plugin.reconcile()
    return ReconcileResponse(
        skipped=result.skipped,
        enabled=result.enabled,
        tracked=result.tracked,
        untracked=result.untracked,
        checked_at=result.checked_at,
    )


@router.post("/afk/events", response_model=EventAcceptedResponse)
async def post_event_route(
    body: dict[str, Any],
    plugin: AutoKickUnassigned = Depends(get_plugin),
) -> EventAcceptedResponse:
    """Dev endpoint: apply a server event directly, bypassing the Redis stream."""

    try:
        event = decode_event(body)
        plugin.handle_event(event)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return EventAcceptedResponse(type=event.type, tracked=len(plugin.registry))
