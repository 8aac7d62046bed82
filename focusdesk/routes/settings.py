from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services.settings_svc import get_settings, update_settings
from .common import get_db, to_http

router = APIRouter()


@router.get("/api/settings/get")
def api_settings_get(db: Database = Depends(get_db)):
    try:
        return get_settings(db)
    except StorageError as e:
        raise to_http(e)


class SettingsUpdateBody(BaseModel):
    work_minutes: int | None = None
    short_break_minutes: int | None = None
    long_break_minutes: int | None = None


@router.post("/api/settings/update")
def api_settings_update(body: SettingsUpdateBody, db: Database = Depends(get_db)):
    log = LogContext(db, "SETTINGS_UPDATE")
    log.set_payload(body.model_dump())
    try:
        settings = update_settings(db, **body.model_dump(), log=log)
        log.write("OK")
        return {"message": "ok", "settings": settings}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
