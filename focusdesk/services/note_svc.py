from __future__ import annotations

from ..db import Database
from ..domain.coerce import bind_optional_ref, bind_text, new_id, to_rfc3339, utc_now
from ..errors import NotFoundError
from ..logs import LogContext
from ..models import Note, to_dict
from ..repository import note_repo


def list_notes(db: Database) -> list[Note]:
    with db.connection() as conn:
        return [Note.from_row(r) for r in note_repo.list_all(conn)]


def get_note(db: Database, note_id: str) -> Note | None:
    with db.connection() as conn:
        row = note_repo.get_one(conn, note_id)
    return Note.from_row(row) if row else None


def create_note(
    db: Database,
    title: str,
    content: str,
    project_id: str | None = None,
    log: LogContext | None = None,
) -> Note:
    title, content = bind_text(title), bind_text(content)
    if project_id is not None:
        project_id = bind_optional_ref(project_id)
    note_id = new_id()
    now = to_rfc3339(utc_now())
    with db.connection() as conn:
        note_repo.insert(conn, note_id, title, content, project_id, now)
        note = Note.from_row(note_repo.get_one(conn, note_id))
    if log:
        log.set_entity("NOTE", note_id)
        log.set_after(to_dict(note))
    return note


def update_note(
    db: Database,
    note_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    project_id: str | None = None,
    log: LogContext | None = None,
) -> Note:
    """Write only the given fields; ``project_id=""`` detaches the note from its project."""
    with db.transaction() as conn:
        before = note_repo.get_one(conn, note_id)
        if before is None:
            raise NotFoundError("note", note_id)
        note_repo.update(conn, note_id, title=title, content=content, project_id=project_id)
        note = Note.from_row(note_repo.get_one(conn, note_id))
    if log:
        log.set_entity("NOTE", note_id)
        log.set_before(dict(before))
        log.set_after(to_dict(note))
    return note


def delete_note(db: Database, note_id: str, log: LogContext | None = None) -> None:
    with db.connection() as conn:
        if note_repo.delete(conn, note_id) == 0:
            raise NotFoundError("note", note_id)
    if log:
        log.set_entity("NOTE", note_id)


def search_notes(db: Database, query: str) -> list[Note]:
    query = bind_text(query)
    with db.connection() as conn:
        return [Note.from_row(r) for r in note_repo.search(conn, query)]


def get_notes_by_project(db: Database, project_id: str) -> list[Note]:
    with db.connection() as conn:
        return [Note.from_row(r) for r in note_repo.list_by_project(conn, project_id)]
