from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import Database
from ..errors import StorageError
from ..logs import LogContext
from ..services import tag_svc
from .common import get_db, to_http

router = APIRouter()


class TagCreate(BaseModel):
    name: str
    color: str | None = None


class TagUpdate(BaseModel):
    id: str
    name: str | None = None
    color: str | None = None


class TagId(BaseModel):
    id: str


class NoteTagLink(BaseModel):
    note_id: str
    tag_id: str


@router.get("/api/tags/list")
def api_tags_list(db: Database = Depends(get_db)):
    try:
        return tag_svc.list_tags(db)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/tags/get")
def api_tags_get(id: str = Query(...), db: Database = Depends(get_db)):
    try:
        tag = tag_svc.get_tag(db, id)
    except StorageError as e:
        raise to_http(e)
    if tag is None:
        raise HTTPException(status_code=404, detail=f"tag_not_found: {id}")
    return tag


@router.get("/api/tags/for-note")
def api_tags_for_note(note_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return tag_svc.get_tags_for_note(db, note_id)
    except StorageError as e:
        raise to_http(e)


@router.get("/api/tags/notes")
def api_tags_notes(tag_id: str = Query(...), db: Database = Depends(get_db)):
    try:
        return {"note_ids": tag_svc.get_notes_by_tag(db, tag_id)}
    except StorageError as e:
        raise to_http(e)


@router.post("/api/tags/create", status_code=201)
def api_tags_create(body: TagCreate, db: Database = Depends(get_db)):
    log = LogContext(db, "CREATE_TAG")
    log.set_payload(body.model_dump())
    try:
        tag = tag_svc.create_tag(db, body.name, body.color, log=log)
        log.write("OK")
        return tag
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tags/update")
def api_tags_update(body: TagUpdate, db: Database = Depends(get_db)):
    log = LogContext(db, "UPDATE_TAG")
    log.set_payload(body.model_dump())
    try:
        tag = tag_svc.update_tag(db, body.id, name=body.name, color=body.color, log=log)
        log.write("OK")
        return {"message": "ok", "tag": tag}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tags/delete")
def api_tags_delete(body: TagId, db: Database = Depends(get_db)):
    log = LogContext(db, "DELETE_TAG")
    log.set_payload(body.model_dump())
    try:
        tag_svc.delete_tag(db, body.id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tags/attach")
def api_tags_attach(body: NoteTagLink, db: Database = Depends(get_db)):
    log = LogContext(db, "ADD_TAG_TO_NOTE")
    log.set_payload(body.model_dump())
    try:
        tag_svc.add_tag_to_note(db, body.note_id, body.tag_id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)


@router.post("/api/tags/detach")
def api_tags_detach(body: NoteTagLink, db: Database = Depends(get_db)):
    log = LogContext(db, "REMOVE_TAG_FROM_NOTE")
    log.set_payload(body.model_dump())
    try:
        tag_svc.remove_tag_from_note(db, body.note_id, body.tag_id, log=log)
        log.write("OK")
        return {"message": "ok"}
    except StorageError as e:
        log.write("ERROR", str(e))
        raise to_http(e)
