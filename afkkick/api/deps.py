from __future__ import annotations

from fastapi import HTTPException, Request, status

from afkkick.plugin import AutoKickUnassigned


def get_plugin(request: Request) -> AutoKickUnassigned:
    plugin = getattr(request.app.state, "plugin", None)
    if plugin is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="AFK kick is not running")
    return plugin
