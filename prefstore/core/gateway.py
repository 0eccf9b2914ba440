"""FastAPI app entry."""

from __future__ import annotations

from fastapi import FastAPI

from prefstore.api.router import close_store, get_store, router as prefs_router
from prefstore.config.settings import settings
from prefstore.util.logger import logger


app = FastAPI(title=settings.app_name)
app.include_router(prefs_router)


@app.get("/health")
def health() -> dict:
    logger.debug("health check")
    return {"status": "ok", "backend": settings.storage_backend}


@app.on_event("startup")
async def open_store() -> None:
    store = get_store()
    logger.info("preference store ready backend=%s", type(store.backend).__name__)


@app.on_event("shutdown")
async def shutdown_cleanup() -> None:
    close_store()
