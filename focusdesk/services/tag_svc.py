from __future__ import annotations

from ..db import Database
from ..domain.coerce import new_id, to_rfc3339, utc_now
from ..errors import NotFoundError
from ..logs import LogContext
from ..models import Tag, to_dict
from ..repository import note_repo, tag_repo
from ..repository.tag_repo import DEFAULT_TAG_COLOR


def list_tags(db: Database) -> list[Tag]:
    with db.connection() as conn:
        return [Tag.from_row(r) for r in tag_repo.list_all(conn)]


def get_tag(db: Database, tag_id: str) -> Tag | None:
    with db.connection() as conn:
        row = tag_repo.get_one(conn, tag_id)
    return Tag.from_row(row) if row else None


def create_tag(db: Database, name: str, color: str | None = None, log: LogContext | None = None) -> Tag:
    """Duplicate names fail on the UNIQUE constraint (QueryExecutionError)."""
    tag_id = new_id()
    with db.connection() as conn:
        tag_repo.insert(conn, tag_id, name, color or DEFAULT_TAG_COLOR, to_rfc3339(utc_now()))
        tag = Tag.from_row(tag_repo.get_one(conn, tag_id))
    if log:
        log.set_entity("TAG", tag_id)
        log.set_after(to_dict(tag))
    return tag


def update_tag(
    db: Database,
    tag_id: str,
    *,
    name: str | None = None,
    color: str | None = None,
    log: LogContext | None = None,
) -> Tag | None:
    """Returns the updated tag, or None without touching storage when no field is given."""
    if name is None and color is None:
        return None
    with db.connection() as conn:
        tag_repo.update(conn, tag_id, name=name, color=color)
        tag = Tag.from_row(tag_repo.get_one(conn, tag_id))
    if log:
        log.set_entity("TAG", tag_id)
        log.set_after(to_dict(tag))
    return tag


def delete_tag(db: Database, tag_id: str, log: LogContext | None = None) -> None:
    with db.transaction() as conn:
        detached = tag_repo.detach_all_for_tag(conn, tag_id)
        if tag_repo.delete(conn, tag_id) == 0:
            raise NotFoundError("tag", tag_id)
    if log:
        log.set_entity("TAG", tag_id)
        log.set_after({"notes_detached": detached})


def add_tag_to_note(db: Database, note_id: str, tag_id: str, log: LogContext | None = None) -> None:
    """Idempotent: attaching an already attached tag is a no-op."""
    with db.connection() as conn:
        if note_repo.get_one(conn, note_id) is None:
            raise NotFoundError("note", note_id)
        if tag_repo.get_one(conn, tag_id) is None:
            raise NotFoundError("tag", tag_id)
        tag_repo.attach(conn, note_id, tag_id)
    if log:
        log.set_entity("NOTE", note_id)
        log.set_after({"tag_id": tag_id})


def remove_tag_from_note(db: Database, note_id: str, tag_id: str, log: LogContext | None = None) -> None:
    with db.connection() as conn:
        tag_repo.detach(conn, note_id, tag_id)
    if log:
        log.set_entity("NOTE", note_id)
        log.set_before({"tag_id": tag_id})


def get_tags_for_note(db: Database, note_id: str) -> list[Tag]:
    with db.connection() as conn:
        return [Tag.from_row(r) for r in tag_repo.list_for_note(conn, note_id)]


def get_notes_by_tag(db: Database, tag_id: str) -> list[str]:
    with db.connection() as conn:
        return tag_repo.note_ids_for_tag(conn, tag_id)
