"""
Generic PATCH-style UPDATE for every entity table.

Each table declares an UpdateSpec: the fixed list of writable columns and the
binder that converts a caller value into what SQLite stores. Column names in
the generated SQL come only from that list; values are always bound as ``?``.
"""
from __future__ import annotations

from dataclasses import dataclass
from sqlite3 import Connection
from typing import Any, Callable, Iterable, Mapping

from ..domain.coerce import to_rfc3339, utc_now
from ..errors import NotFoundError, ValidationError

Binder = Callable[[Any], Any]


@dataclass(frozen=True)
class UpdateSpec:
    table: str
    entity: str
    columns: tuple[tuple[str, Binder], ...]
    touch_column: str | None = "updated_at"

    def binder(self, field: str) -> Binder:
        for name, bind in self.columns:
            if name == field:
                return bind
        raise ValidationError(f"{self.entity}: field '{field}' is not updatable")


@dataclass(frozen=True)
class UpdateStatement:
    sql: str
    params: tuple


def _pairs(fields: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> list[tuple[str, Any]]:
    if isinstance(fields, Mapping):
        return list(fields.items())
    return list(fields)


def build_update(
    spec: UpdateSpec,
    entity_id: str,
    fields: Mapping[str, Any] | Iterable[tuple[str, Any]],
    now: str | None = None,
) -> UpdateStatement | None:
    """
    Build the UPDATE for the present (non-None) fields, in the order given.

    Every binder runs before any SQL is assembled, so a bad value raises
    ValidationError without touching storage. Returns None when there is
    nothing to write (no present field and no touch column).
    """
    if not entity_id:
        raise ValidationError(f"{spec.entity}: id is required")

    assignments: list[str] = []
    params: list[Any] = []
    for field, value in _pairs(fields):
        bind = spec.binder(field)
        if value is None:
            continue
        assignments.append(f"{field} = ?")
        params.append(bind(value))

    if spec.touch_column:
        assignments.append(f"{spec.touch_column} = ?")
        params.append(now or to_rfc3339(utc_now()))
    if not assignments:
        return None

    params.append(entity_id)
    sql = f"UPDATE {spec.table} SET {', '.join(assignments)} WHERE id = ?"
    return UpdateStatement(sql, tuple(params))


def apply_update(
    conn: Connection,
    spec: UpdateSpec,
    entity_id: str,
    fields: Mapping[str, Any] | Iterable[tuple[str, Any]],
    now: str | None = None,
) -> int:
    """Execute build_update once. Returns rows affected; raises NotFoundError on zero."""
    stmt = build_update(spec, entity_id, fields, now)
    if stmt is None:
        return 0
    cur = conn.execute(stmt.sql, stmt.params)
    if cur.rowcount == 0:
        raise NotFoundError(spec.entity, entity_id)
    return cur.rowcount
