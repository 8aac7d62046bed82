import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "focusdesk_test.db"
    # Point focusdesk to this temp DB
    os.environ["FOCUSDESK_DB_PATH"] = str(path)
    return str(path)


@pytest.fixture(scope="session")
def db(tmp_db_path):
    from focusdesk.db import Database, ensure_schema
    database = Database(tmp_db_path, pool_size=2, timeout=1.0)
    ensure_schema(database)
    yield database
    database.close()


@pytest.fixture()
def client(db):
    # Import app factory after DB ready so startup hooks can use it
    from focusdesk.api import create_app
    from fastapi.testclient import TestClient
    with TestClient(create_app(db)) as c:
        yield c


@pytest.fixture(autouse=True)
def _clean_db(db, tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert db.path == tmp_db_path, "Refusing to clean non-temp DB"
    from focusdesk.services.settings_svc import ensure_default_settings
    tables = [
        "column_tasks",
        "note_tags",
        "pomodoro_sessions",
        "kanban_columns",
        "tasks",
        "notes",
        "tags",
        "projects",
        "settings",
        "operation_log",
    ]
    with db.connection() as conn:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
    ensure_default_settings(db)
    yield
