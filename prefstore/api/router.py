"""Preference and redirect routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from prefstore.core.errors import CommitFailedError, InvalidStoreNameError
from prefstore.core.models import ApplyRequest, PutValueRequest
from prefstore.core.preferences import PreferenceStore
from prefstore.core.redirect import RedirectGetter
from prefstore.storage import create_backend
from prefstore.util.logger import logger


router = APIRouter()
_store: PreferenceStore | None = None


def get_store() -> PreferenceStore:
    global _store
    if _store is None:
        _store = PreferenceStore(create_backend())
    return _store


def set_store(store: PreferenceStore | None) -> None:
    global _store
    _store = store


def close_store() -> None:
    global _store
    if _store is not None:
        _store.close()
        _store = None


def _invalid_store_response(exc: InvalidStoreNameError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "invalid_store_name", "detail": str(exc)})


@router.get("/redirect/text")
def redirect_text(store: PreferenceStore = Depends(get_store)) -> dict:
    return {"text": RedirectGetter(store).load()}


@router.post("/redirect/apply")
def redirect_apply(body: ApplyRequest, store: PreferenceStore = Depends(get_store)):
    try:
        outcome = RedirectGetter(store).apply(body.text)
    except CommitFailedError as exc:
        logger.error("redirect apply failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": "commit_failed", "detail": str(exc)})
    return {
        "result": "ok" if outcome.ok else "canceled",
        "result_code": int(outcome.result),
        "committed": outcome.committed,
    }


@router.get("/prefs/{store_name}/{key}")
def read_preference(store_name: str, key: str, store: PreferenceStore = Depends(get_store)):
    try:
        value = store.get(store_name, key, None)
    except InvalidStoreNameError as exc:
        return _invalid_store_response(exc)
    return {"store": store_name, "key": key, "value": value}


@router.put("/prefs/{store_name}/{key}")
def write_preference(
    store_name: str,
    key: str,
    body: PutValueRequest,
    store: PreferenceStore = Depends(get_store),
):
    try:
        committed = store.put(store_name, key, body.value)
    except InvalidStoreNameError as exc:
        return _invalid_store_response(exc)
    if not committed:
        return JSONResponse(status_code=503, content={"committed": False, "error": "commit_failed"})
    return {"committed": True}
