"""Entity values and aggregate results returned by the service layer."""
from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass
from sqlite3 import Row
from typing import Any, Optional

from .domain.coerce import parse_timestamp, read_bool
from .errors import RowMappingError


def _ts(row: Row, column: str) -> dt.datetime:
    raw = row[column]
    try:
        return parse_timestamp(raw)
    except (TypeError, ValueError, AttributeError):
        raise RowMappingError(f"column {column}: cannot parse {raw!r} as timestamp") from None


def _opt_ts(row: Row, column: str) -> Optional[dt.datetime]:
    if row[column] is None:
        return None
    return _ts(row, column)


def _plain(v: Any) -> Any:
    if isinstance(v, dt.datetime):
        return v.isoformat()
    if isinstance(v, dict):
        return {k: _plain(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_plain(x) for x in v]
    return v


def to_dict(obj) -> dict[str, Any]:
    """JSON-friendly dict: datetimes become RFC 3339 strings."""
    return _plain(asdict(obj))


@dataclass
class Note:
    id: str
    title: str
    content: str
    created_at: dt.datetime
    updated_at: dt.datetime
    project_id: Optional[str] = None

    @classmethod
    def from_row(cls, r: Row) -> "Note":
        return cls(
            id=r["id"],
            title=r["title"],
            content=r["content"],
            created_at=_ts(r, "created_at"),
            updated_at=_ts(r, "updated_at"),
            project_id=r["project_id"],
        )


@dataclass
class Task:
    id: str
    title: str
    description: Optional[str]
    is_completed: bool
    priority: int
    due_date: Optional[dt.datetime]
    remind_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime
    project_id: Optional[str]
    parent_id: Optional[str]
    position: int

    @classmethod
    def from_row(cls, r: Row) -> "Task":
        return cls(
            id=r["id"],
            title=r["title"],
            description=r["description"],
            is_completed=read_bool(r["is_completed"]),
            priority=int(r["priority"]),
            due_date=_opt_ts(r, "due_date"),
            remind_at=_opt_ts(r, "remind_at"),
            created_at=_ts(r, "created_at"),
            updated_at=_ts(r, "updated_at"),
            project_id=r["project_id"],
            parent_id=r["parent_id"],
            position=int(r["position"]),
        )


@dataclass
class Project:
    id: str
    name: str
    description: Optional[str]
    color: str
    is_archived: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_row(cls, r: Row) -> "Project":
        return cls(
            id=r["id"],
            name=r["name"],
            description=r["description"],
            color=r["color"],
            is_archived=read_bool(r["is_archived"]),
            created_at=_ts(r, "created_at"),
            updated_at=_ts(r, "updated_at"),
        )


@dataclass
class Tag:
    id: str
    name: str
    color: str
    created_at: dt.datetime

    @classmethod
    def from_row(cls, r: Row) -> "Tag":
        return cls(id=r["id"], name=r["name"], color=r["color"], created_at=_ts(r, "created_at"))


@dataclass
class PomodoroSession:
    id: str
    task_id: Optional[str]
    duration_minutes: int
    is_completed: bool
    started_at: dt.datetime
    completed_at: Optional[dt.datetime]
    created_at: dt.datetime

    @classmethod
    def from_row(cls, r: Row) -> "PomodoroSession":
        return cls(
            id=r["id"],
            task_id=r["task_id"],
            duration_minutes=int(r["duration_minutes"]),
            is_completed=read_bool(r["is_completed"]),
            started_at=_ts(r, "started_at"),
            completed_at=_opt_ts(r, "completed_at"),
            created_at=_ts(r, "created_at"),
        )


@dataclass
class KanbanColumn:
    id: str
    project_id: str
    name: str
    color: str
    position: int
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_row(cls, r: Row) -> "KanbanColumn":
        return cls(
            id=r["id"],
            project_id=r["project_id"],
            name=r["name"],
            color=r["color"],
            position=int(r["position"]),
            created_at=_ts(r, "created_at"),
            updated_at=_ts(r, "updated_at"),
        )


@dataclass
class ColumnTask:
    column_id: str
    position: int
    task: Task


@dataclass
class ProjectStats:
    total_tasks: int
    completed_tasks: int
    pending_tasks: int


@dataclass
class PomodoroStats:
    total_sessions: int
    completed_sessions: int
    total_minutes: int
    avg_duration: Optional[float]


@dataclass
class PomodoroSettings:
    work_minutes: int
    short_break_minutes: int
    long_break_minutes: int
