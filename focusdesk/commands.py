"""
Remote-procedure surface for the desktop shell.

Each command name maps to a service function. ``invoke`` binds the caller's
arguments, runs the function against the given Database, and returns either
the result (dataclasses flattened to dicts) or one human-readable error
string. Mutating commands are recorded in the operation log.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, is_dataclass
from typing import Any, Callable

from .db import Database
from .errors import StorageError
from .logs import LogContext
from .models import to_dict
from .services import kanban_svc, note_svc, pomodoro_svc, project_svc, settings_svc, tag_svc, task_svc

logger = logging.getLogger(__name__)

COMMANDS: dict[str, Callable[..., Any]] = {
    # notes
    "get_all_notes": note_svc.list_notes,
    "get_note_by_id": note_svc.get_note,
    "create_note": note_svc.create_note,
    "update_note": note_svc.update_note,
    "delete_note": note_svc.delete_note,
    "search_notes": note_svc.search_notes,
    "get_notes_by_project": note_svc.get_notes_by_project,
    # tasks
    "get_all_tasks": task_svc.list_tasks,
    "get_task_by_id": task_svc.get_task,
    "create_task": task_svc.create_task,
    "update_task": task_svc.update_task,
    "delete_task": task_svc.delete_task,
    "update_task_position": task_svc.update_task_position,
    "get_tasks_by_project": task_svc.get_tasks_by_project,
    "toggle_task_complete": task_svc.toggle_task_complete,
    "get_subtasks": task_svc.get_subtasks,
    "move_task_to_parent": task_svc.move_task_to_parent,
    # pomodoro
    "get_all_pomodoro_sessions": pomodoro_svc.list_sessions,
    "start_pomodoro_session": pomodoro_svc.start_session,
    "complete_pomodoro_session": pomodoro_svc.complete_session,
    "cancel_pomodoro_session": pomodoro_svc.cancel_session,
    "get_pomodoro_stats": pomodoro_svc.get_stats,
    "get_sessions_by_task": pomodoro_svc.get_sessions_by_task,
    # projects
    "get_all_projects": project_svc.list_projects,
    "get_project_by_id": project_svc.get_project,
    "create_project": project_svc.create_project,
    "update_project": project_svc.update_project,
    "delete_project": project_svc.delete_project,
    "get_project_stats": project_svc.get_project_stats,
    "archive_project": project_svc.archive_project,
    "unarchive_project": project_svc.unarchive_project,
    # tags
    "get_all_tags": tag_svc.list_tags,
    "get_tag_by_id": tag_svc.get_tag,
    "create_tag": tag_svc.create_tag,
    "update_tag": tag_svc.update_tag,
    "delete_tag": tag_svc.delete_tag,
    "add_tag_to_note": tag_svc.add_tag_to_note,
    "remove_tag_from_note": tag_svc.remove_tag_from_note,
    "get_tags_for_note": tag_svc.get_tags_for_note,
    "get_notes_by_tag": tag_svc.get_notes_by_tag,
    # kanban
    "get_kanban_columns": kanban_svc.get_columns,
    "create_kanban_column": kanban_svc.create_column,
    "update_kanban_column": kanban_svc.update_column,
    "delete_kanban_column": kanban_svc.delete_column,
    "move_task_to_column": kanban_svc.move_task_to_column,
    "get_column_tasks": kanban_svc.get_column_tasks,
    # settings
    "get_settings": settings_svc.get_settings,
    "update_settings": settings_svc.update_settings,
}


@dataclass
class CommandResult:
    ok: bool
    data: Any = None
    error: str | None = None


def is_read_only(name: str) -> bool:
    return name.startswith(("get_", "search_"))


def to_plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    return value


def invoke(db: Database, name: str, args: dict[str, Any] | None = None) -> CommandResult:
    fn = COMMANDS.get(name)
    if fn is None:
        return CommandResult(ok=False, error=f"unknown command: {name}")
    args = dict(args or {})
    args.pop("log", None)

    log = None
    if not is_read_only(name):
        log = LogContext(db, name.upper())
        log.set_payload(args)
        args["log"] = log

    try:
        bound = inspect.signature(fn).bind(db, **args)
    except TypeError as e:
        msg = f"invalid arguments for {name}: {e}"
        if log:
            log.write("ERROR", msg)
        return CommandResult(ok=False, error=msg)

    try:
        value = fn(*bound.args, **bound.kwargs)
    except StorageError as e:
        if log:
            log.write("ERROR", str(e))
        logger.debug("command %s failed: %s", name, e)
        return CommandResult(ok=False, error=str(e))
    except (TypeError, AttributeError, ValueError) as e:
        # argument of the wrong type that no binder caught
        msg = f"invalid arguments for {name}: {e}"
        if log:
            log.write("ERROR", msg)
        logger.warning("command %s rejected: %s", name, e)
        return CommandResult(ok=False, error=msg)
    if log:
        log.write("OK")
    return CommandResult(ok=True, data=to_plain(value))
