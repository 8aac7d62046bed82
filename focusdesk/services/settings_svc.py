# focusdesk/services/settings_svc.py
from __future__ import annotations

from ..db import Database
from ..domain.coerce import bind_int
from ..errors import ValidationError
from ..logs import LogContext
from ..models import PomodoroSettings
from ..repository import settings_repo

DEFAULTS = {
    "pomodoro_work_minutes": "25",
    "pomodoro_short_break_minutes": "5",
    "pomodoro_long_break_minutes": "15",
}


def ensure_default_settings(db: Database) -> None:
    """Insert missing defaults; never overwrites stored values."""
    with db.connection() as conn:
        for k, v in DEFAULTS.items():
            settings_repo.insert_default(conn, k, v)


def _minutes(cfg: dict, key: str) -> int:
    try:
        return int(cfg.get(key, DEFAULTS[key]))
    except ValueError:
        return int(DEFAULTS[key])


def get_settings(db: Database) -> PomodoroSettings:
    with db.connection() as conn:
        cfg = settings_repo.get_all(conn)
    return PomodoroSettings(
        work_minutes=_minutes(cfg, "pomodoro_work_minutes"),
        short_break_minutes=_minutes(cfg, "pomodoro_short_break_minutes"),
        long_break_minutes=_minutes(cfg, "pomodoro_long_break_minutes"),
    )


def update_settings(
    db: Database,
    *,
    work_minutes: int | None = None,
    short_break_minutes: int | None = None,
    long_break_minutes: int | None = None,
    log: LogContext | None = None,
) -> PomodoroSettings:
    upd = {
        "pomodoro_work_minutes": work_minutes,
        "pomodoro_short_break_minutes": short_break_minutes,
        "pomodoro_long_break_minutes": long_break_minutes,
    }
    upd = {k: bind_int(v) for k, v in upd.items() if v is not None}
    for k, v in upd.items():
        if v <= 0:
            raise ValidationError(f"{k} must be positive, got {v}")
    before = get_settings(db)
    with db.transaction() as conn:
        for k, v in upd.items():
            settings_repo.upsert(conn, k, str(v))
    after = get_settings(db)
    if log:
        log.set_entity("SETTINGS", "pomodoro")
        log.set_before(vars(before))
        log.set_after(vars(after))
    return after
