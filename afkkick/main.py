from fastapi import FastAPI
import logging

from afkkick.api.routes import router
from afkkick.startup import init_plugin_for_app, shutdown_plugin_for_app

app = FastAPI(title="afkkick", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_plugin_for_app(app)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await shutdown_plugin_for_app(app)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "afkkick", "version": "0.1.0"}
