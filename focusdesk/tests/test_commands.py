from focusdesk.commands import COMMANDS, invoke


def test_registry_covers_operation_surface():
    expected = {
        "get_all_notes", "get_note_by_id", "create_note", "update_note", "delete_note", "search_notes",
        "get_all_tasks", "create_task", "update_task", "delete_task", "update_task_position",
        "get_tasks_by_project", "get_all_pomodoro_sessions", "start_pomodoro_session",
        "complete_pomodoro_session", "cancel_pomodoro_session", "get_pomodoro_stats", "get_sessions_by_task",
        "get_all_projects", "get_project_by_id", "create_project", "update_project", "delete_project",
        "get_project_stats", "archive_project", "unarchive_project", "get_all_tags", "create_tag",
        "update_tag", "delete_tag", "add_tag_to_note", "remove_tag_from_note", "get_tags_for_note",
        "get_notes_by_tag",
    }
    assert expected <= set(COMMANDS)


def test_invoke_roundtrip_returns_plain_data(db):
    res = invoke(db, "create_note", {"title": "t", "content": "c"})
    assert res.ok, res.error
    assert res.data["title"] == "t"
    assert isinstance(res.data["created_at"], str)

    got = invoke(db, "get_note_by_id", {"note_id": res.data["id"]})
    assert got.ok
    assert got.data == res.data


def test_invoke_errors_are_strings(db):
    res = invoke(db, "delete_note", {"note_id": "missing"})
    assert not res.ok
    assert res.error == "note_not_found: missing"

    res = invoke(db, "create_note", {"nope": 1})
    assert not res.ok
    assert res.error.startswith("invalid arguments for create_note")

    res = invoke(db, "no_such_command")
    assert not res.ok
    assert "unknown command" in res.error


def test_mutations_are_logged(db):
    invoke(db, "create_project", {"name": "Launch"})
    invoke(db, "get_all_projects")
    invoke(db, "delete_project", {"project_id": "missing"})
    with db.connection() as conn:
        rows = conn.execute("SELECT action, result FROM operation_log ORDER BY id").fetchall()
    assert [(r["action"], r["result"]) for r in rows] == [
        ("CREATE_PROJECT", "OK"),
        ("DELETE_PROJECT", "ERROR"),
    ]


def test_nested_results_flattened(db):
    p = invoke(db, "create_project", {"name": "Board"}).data
    col = invoke(db, "create_kanban_column", {"project_id": p["id"], "name": "Todo"}).data
    t = invoke(db, "create_task", {"title": "a", "project_id": p["id"]}).data
    res = invoke(db, "move_task_to_column", {"task_id": t["id"], "column_id": col["id"]})
    assert res.ok, res.error
    assert res.data["task"]["id"] == t["id"]
    assert isinstance(res.data["task"]["created_at"], str)


def test_wrong_argument_types_come_back_as_errors(db):
    res = invoke(db, "search_notes", {"query": 5})
    assert not res.ok
    assert "invalid text" in res.error

    res = invoke(db, "get_pomodoro_stats", {"start_date": 20250101})
    assert not res.ok
    assert "invalid date" in res.error

    res = invoke(db, "create_note", {"title": "t", "content": "c", "project_id": 7})
    assert not res.ok
    assert "invalid id" in res.error
    with db.connection() as conn:
        row = conn.execute("SELECT action, result FROM operation_log ORDER BY id DESC LIMIT 1").fetchone()
    assert (row["action"], row["result"]) == ("CREATE_NOTE", "ERROR")
