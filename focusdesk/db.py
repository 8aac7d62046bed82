from __future__ import annotations

# focusdesk/db.py
import logging
import os
import queue
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import yaml

from .domain.coerce import to_rfc3339, utc_now
from .errors import ConnectionAcquisitionError, QueryExecutionError

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) env FOCUSDESK_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: <project root>/focusdesk.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "focusdesk.db")
_SCHEMA_PATH = Path(__file__).with_name("schema.sql")

DEFAULT_POOL_SIZE = 4
DEFAULT_POOL_TIMEOUT = 5.0

# Columns added after the first release; checked before the schema script runs
# so that indexes in schema.sql can rely on them. Timestamp columns added this
# way are backfilled in _backfill_legacy so that every row maps.
_ADDITIVE_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "projects": [("is_archived", "INTEGER NOT NULL DEFAULT 0")],
    "tags": [("created_at", "TEXT")],
    "kanban_columns": [
        ("color", "TEXT NOT NULL DEFAULT '#6B7280'"),
        ("created_at", "TEXT"),
        ("updated_at", "TEXT"),
    ],
}

# Pomodoro tables from the first release carry `duration INTEGER NOT NULL`
# (minutes) and `ended_at`; SQLite cannot relax NOT NULL, so the table is rebuilt.
_LEGACY_POMODORO = "pomodoro_sessions_legacy"


def read_config_yaml() -> dict:
    cfg_path = os.environ.get("FOCUSDESK_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    out: dict = {}
    for k in ("db_path", "test_db_path", "log_level"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    for k, cast in (("pool_size", int), ("pool_timeout", float)):
        v = cfg.get(k)
        if v is not None:
            try:
                out[k] = cast(v)
            except (TypeError, ValueError):
                logger.warning("ignoring invalid %s=%r in %s", k, v, cfg_path)
    return out


def get_db_path() -> str:
    env_path = os.environ.get("FOCUSDESK_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


class Database:
    """
    Bounded pool of SQLite connections shared by every operation.

    Connections are opened lazily up to ``pool_size``. ``connection()`` borrows
    one for the duration of a ``with`` block; when all are in use the caller
    waits up to ``timeout`` seconds and then gets ConnectionAcquisitionError.
    sqlite3 errors raised inside the block surface as QueryExecutionError.
    """

    def __init__(self, path: str | None = None, pool_size: int | None = None, timeout: float | None = None):
        cfg = read_config_yaml()
        self.path = path or get_db_path()
        self.pool_size = int(pool_size or cfg.get("pool_size") or DEFAULT_POOL_SIZE)
        self.timeout = float(timeout if timeout is not None else cfg.get("pool_timeout", DEFAULT_POOL_TIMEOUT))
        self._idle: queue.LifoQueue[sqlite3.Connection] = queue.LifoQueue()
        self._opened = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Database(path={self.path!r}, pool_size={self.pool_size})"

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.path,
            check_same_thread=False,
            isolation_level=None,
            timeout=self.timeout,
        )
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        return conn

    def _acquire(self) -> sqlite3.Connection:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass
        with self._lock:
            if self._opened < self.pool_size:
                try:
                    conn = self._open()
                except sqlite3.Error as e:
                    raise ConnectionAcquisitionError(f"cannot open database {self.path}: {e}") from e
                self._opened += 1
                logger.debug("opened pooled connection %d/%d to %s", self._opened, self.pool_size, self.path)
                return conn
        try:
            return self._idle.get(timeout=self.timeout)
        except queue.Empty:
            raise ConnectionAcquisitionError(
                f"connection pool exhausted: {self.pool_size} connections busy for {self.timeout}s"
            ) from None

    def _release(self, conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.rollback()
        self._idle.put(conn)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._acquire()
        try:
            yield conn
        except sqlite3.Error as e:
            raise QueryExecutionError(str(e)) from e
        finally:
            self._release(conn)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Borrow a connection and run the block inside BEGIN IMMEDIATE ... COMMIT."""
        with self.connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def close(self) -> None:
        with self._lock:
            while True:
                try:
                    conn = self._idle.get_nowait()
                except queue.Empty:
                    break
                conn.close()
                self._opened -= 1


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {r[1] for r in conn.execute(f"PRAGMA table_info({table})").fetchall()}


def _stash_legacy_pomodoro(conn: sqlite3.Connection) -> bool:
    existing = _table_columns(conn, "pomodoro_sessions")
    if not existing or "duration_minutes" in existing:
        return False
    logger.info("rebuilding pomodoro_sessions from first-release layout")
    conn.execute(f"ALTER TABLE pomodoro_sessions RENAME TO {_LEGACY_POMODORO}")
    return True


def _restore_legacy_pomodoro(conn: sqlite3.Connection) -> None:
    legacy = _table_columns(conn, _LEGACY_POMODORO)
    duration = "duration" if "duration" in legacy else "25"
    ended = "ended_at" if "ended_at" in legacy else "NULL"
    conn.execute(
        f"""INSERT OR IGNORE INTO pomodoro_sessions
        (id, task_id, duration_minutes, is_completed, started_at, completed_at, created_at)
        SELECT id, task_id, {duration}, is_completed, started_at,
               CASE WHEN is_completed = 1 THEN COALESCE({ended}, started_at) END,
               started_at
        FROM {_LEGACY_POMODORO}"""
    )
    conn.execute(f"DROP TABLE {_LEGACY_POMODORO}")


def _backfill_legacy(conn: sqlite3.Connection, columns: dict[str, set[str]], now: str) -> None:
    if "status" in columns.get("projects", ()):
        conn.execute("UPDATE projects SET is_archived = 1 WHERE status = 'archived' AND is_archived = 0")
    if columns.get("tags"):
        conn.execute("UPDATE tags SET created_at = ? WHERE created_at IS NULL", (now,))
    if columns.get("kanban_columns"):
        conn.execute("UPDATE kanban_columns SET created_at = ? WHERE created_at IS NULL", (now,))
        conn.execute("UPDATE kanban_columns SET updated_at = created_at WHERE updated_at IS NULL")


def ensure_schema(db: Database) -> None:
    """
    Create tables and indexes if missing. Safe to call on every startup.

    Databases written by the first release are upgraded in place: missing
    columns are added and backfilled, and the pomodoro table is rebuilt.
    """
    script = _SCHEMA_PATH.read_text(encoding="utf-8")
    with db.connection() as conn:
        columns = {}
        for table, additions in _ADDITIVE_COLUMNS.items():
            existing = _table_columns(conn, table)
            columns[table] = existing
            if not existing:
                continue
            for name, decl in additions:
                if name not in existing:
                    logger.info("adding column %s.%s", table, name)
                    conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
        # a leftover legacy table means an earlier rebuild stopped half way
        rebuilt = _stash_legacy_pomodoro(conn) or bool(_table_columns(conn, _LEGACY_POMODORO))
        conn.executescript(script)
        if rebuilt:
            _restore_legacy_pomodoro(conn)
            # indexes that went away with the legacy table
            conn.executescript(script)
        _backfill_legacy(conn, columns, to_rfc3339(utc_now()))
    logger.info("schema ready at %s", db.path)
