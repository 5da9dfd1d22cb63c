from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from afkkick.admin import RedisAdminActions
from afkkick.config import config_from_env, load_dotenv_if_present
from afkkick.event_runner import run_event_loop
from afkkick.infra.redis_client import create_redis
from afkkick.plugin import AutoKickUnassigned
from afkkick.roster import RedisRoster

logger = logging.getLogger(__name__)


def init_plugin_for_app(app: FastAPI) -> None:
    """Build the plugin against Redis and start its timers and event consumer.

    No-op if `app.state.plugin` is already set (tests inject their own).
    """

    if getattr(app.state, "plugin", None) is not None:
        return

    load_dotenv_if_present()
    config = config_from_env()
    r = create_redis()

    plugin = AutoKickUnassigned(config=config, roster=RedisRoster(r=r), admin=RedisAdminActions(r=r))
    plugin.start()

    app.state.redis = r
    app.state.plugin = plugin
    app.state.event_task = asyncio.create_task(run_event_loop(r=r, plugin=plugin))


async def shutdown_plugin_for_app(app: FastAPI) -> None:
    task: asyncio.Task[None] | None = getattr(app.state, "event_task", None)
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Server event consumer had failed before shutdown")
        app.state.event_task = None

    plugin: AutoKickUnassigned | None = getattr(app.state, "plugin", None)
    if plugin is not None and task is not None:
        # Only stop what we started; injected plugins belong to the caller.
        plugin.stop()
        app.state.plugin = None

    r = getattr(app.state, "redis", None)
    if r is not None:
        try:
            r.close()
        except Exception:
            # Some redis client versions don't require explicit close.
            pass
        app.state.redis = None
