from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import note_svc
from .common import get_db, to_http

router = APIRouter()


class NoteCreate(BaseModel):
    title: str
    content: str = ""
    project_id: str | None = None


class NoteUpdate(BaseModel):
    id: str
    title: str | None = None
    content: str | None = None
    project_id: str | None = None


class NoteId(BaseModel):
    id: str


@router.get("/api/notes/list")
def api_notes_list(db: Database = Depends(get_db)):
    try:
        return note_svc.list_notes(db)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/notes/get")
def api_notes_get(id: str = Query(...), db: Database = Depends(get_db)):
    try:
        note = note_svc.get_note(db, id)
    except StorageError as e:
        raise to_http(e)
    if note is None:
        raise HTTPException(status_code=404, detail=f"note_not_found: {id}")
    return note


@router.get("/api/notes/search")
def api_notes_search(q: str = Query(...), db: Database = Depends(get_db)):
    try:
        return note_svc.search_notes(db, q)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/notes/by-project")
def api_notes_by_project(project_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return note_svc.get_notes_by_project(db, project_id)
    except StorageError as e:
        raise to_http(e)


@router.post("/api/notes/create", status_code=201)
def api_notes_create(body: NoteCreate, db: Database = Depends(get_db)):
    log = LogContext(db, "CREATE_NOTE")
    log.set_payload(body.model_dump())
    try:
        note = note_svc.create_note(db, body.title, body.content, body.project_id, log=log)
        log.write("OK")
        return note
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/notes/update")
def api_notes_update(body: NoteUpdate, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_NOTE")
    log.set_payload(body.model_dump())
    try:
        note = note_svc.update_note(
            db, body.id, title=body.title, content=body.content, project_id=body.project_id, log=log
        )
        log.write("OK")
        return note
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/notes/delete")
def api_notes_delete(body: NoteId, db: Database = Depends(get_db)):
    log = LogContext(db, "DELETE_NOTE")
    log.set_payload(body.model_dump())
    try:
        note_svc.delete_note(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
