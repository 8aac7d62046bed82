from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import pomodoro_svc
from .common import get_db, to_http

router = APIRouter()


class SessionStart(BaseModel):
    task_id: str | None = None
    duration_minutes: int | None = None


class SessionId(BaseModel):
    id: str


@router.get("/api/pomodoro/list")
def api_pomodoro_list(db: Database = Depends(get_db)):
    try:
        return pomodoro_svc.list_sessions(db)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/pomodoro/by-task")
def api_pomodoro_by_task(task_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return pomodoro_svc.get_sessions_by_task(db, task_id)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/pomodoro/stats")
def api_pomodoro_stats(start: str | None = None, end: str | None = None, db: Database = Depends(get_db)):
    try:
        return pomodoro_svc.get_stats(db, start, end)
    except StorageError as e:
        raise to_http(e)


@router.post("/api/pomodoro/start", status_code=201)
def api_pomodoro_start(body: SessionStart, db: Database = Depends(get_db)):
    log = LogContext(db, "START_POMODORO")
    log.set_payload(body.model_dump())
    try:
        session = pomodoro_svc.start_session(db, body.task_id, body.duration_minutes, log=log)
        log.write("OK")
        return session
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/pomodoro/complete")
def api_pomodoro_complete(body: SessionId, db: Database = Depends(get_db)):
    log = LogContext(db, "COMPLETE_POMODORO")
    log.set_payload(body.model_dump())
    try:
        session = pomodoro_svc.complete_session(db, body.id, log=log)
        log.write("OK")
        return session
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/pomodoro/cancel")
def api_pomodoro_cancel(body: SessionId, db: Database = Depends(get_db)):
    log = LogContext(db, "CANCEL_POMODORO")
    log.set_payload(body.model_dump())
    try:
        pomodoro_svc.cancel_session(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
