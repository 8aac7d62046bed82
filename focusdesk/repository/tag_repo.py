from __future__ import annotations

from sqlite3 import Connection

from ..domain.coerce import bind_text
from .partial_update import UpdateSpec, apply_update

DEFAULT_TAG_COLOR = "#6B7280"

_COLUMNS = "id, name, color, created_at"

# Tags have no modification timestamp, so an empty update is a no-op.
TAG_UPDATE = UpdateSpec(
    table="tags",
    entity="tag",
    columns=(("name", bind_text), ("color", bind_text)),
    touch_column=None,
)


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLUMNS} FROM tags ORDER BY name ASC").fetchall()


def get_one(conn: Connection, tag_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM tags WHERE id=?", (tag_id,)).fetchone()


def insert(conn: Connection, tag_id: str, name: str, color: str, now: str) -> None:
    conn.execute(
        "INSERT INTO tags(id, name, color, created_at) VALUES(?,?,?,?)",
        (tag_id, name, color, now),
    )


def update(conn: Connection, tag_id: str, *, name: str | None = None, color: str | None = None) -> int:
    return apply_update(conn, TAG_UPDATE, tag_id, [("name", name), ("color", color)])


def delete(conn: Connection, tag_id: str) -> int:
    return conn.execute("DELETE FROM tags WHERE id=?", (tag_id,)).rowcount


# ===== note_tags association =====
def attach(conn: Connection, note_id: str, tag_id: str) -> None:
    conn.execute("INSERT OR IGNORE INTO note_tags(note_id, tag_id) VALUES(?, ?)", (note_id, tag_id))


def detach(conn: Connection, note_id: str, tag_id: str) -> int:
    return conn.execute(
        "DELETE FROM note_tags WHERE note_id=? AND tag_id=?",
        (note_id, tag_id),
    ).rowcount


def detach_all_for_tag(conn: Connection, tag_id: str) -> int:
    return conn.execute("DELETE FROM note_tags WHERE tag_id=?", (tag_id,)).rowcount


def list_for_note(conn: Connection, note_id: str):
    return conn.execute(
        "SELECT t.id, t.name, t.color, t.created_at "
        "FROM tags t INNER JOIN note_tags nt ON t.id = nt.tag_id "
        "WHERE nt.note_id=? ORDER BY t.name ASC",
        (note_id,),
    ).fetchall()


def note_ids_for_tag(conn: Connection, tag_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT nt.note_id FROM note_tags nt JOIN notes n ON n.id = nt.note_id "
        "WHERE nt.tag_id=? ORDER BY n.updated_at DESC",
        (tag_id,),
    ).fetchall()
    return [r["note_id"] for r in rows]
