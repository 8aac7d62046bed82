import pytest

from focusdesk.errors import NotFoundError, ValidationError
from focusdesk.services import pomodoro_svc, settings_svc, task_svc


def test_start_uses_configured_work_length(db):
    s = pomodoro_svc.start_session(db)
    assert s.duration_minutes == 25
    assert s.is_completed is False
    assert s.completed_at is None

    settings_svc.update_settings(db, work_minutes=50)
    assert pomodoro_svc.start_session(db).duration_minutes == 50


def test_start_validation(db):
    with pytest.raises(ValidationError):
        pomodoro_svc.start_session(db, duration_minutes=0)
    with pytest.raises(NotFoundError):
        pomodoro_svc.start_session(db, task_id="missing")


def test_complete_is_first_stamp_wins(db):
    s = pomodoro_svc.start_session(db, duration_minutes=25)
    first = pomodoro_svc.complete_session(db, s.id)
    again = pomodoro_svc.complete_session(db, s.id)
    assert first.is_completed is True
    assert first.completed_at is not None
    assert again.completed_at == first.completed_at
    with pytest.raises(NotFoundError):
        pomodoro_svc.complete_session(db, "missing")


def test_stats_without_completed_sessions(db):
    pomodoro_svc.start_session(db, duration_minutes=25)
    stats = pomodoro_svc.get_stats(db)
    assert stats.total_sessions == 1
    assert stats.completed_sessions == 0
    assert stats.total_minutes == 0
    assert stats.avg_duration is None


def test_stats_over_completed_sessions(db):
    a = pomodoro_svc.start_session(db, duration_minutes=20)
    b = pomodoro_svc.start_session(db, duration_minutes=30)
    pomodoro_svc.start_session(db, duration_minutes=45)
    pomodoro_svc.complete_session(db, a.id)
    pomodoro_svc.complete_session(db, b.id)
    stats = pomodoro_svc.get_stats(db)
    assert (stats.total_sessions, stats.completed_sessions, stats.total_minutes) == (3, 2, 50)
    assert stats.avg_duration == pytest.approx(25.0)


def test_stats_date_range(db):
    pomodoro_svc.start_session(db)
    assert pomodoro_svc.get_stats(db, "2000-01-01", "2000-12-31").total_sessions == 0
    assert pomodoro_svc.get_stats(db, "2000-01-01", None).total_sessions == 1
    with pytest.raises(ValidationError):
        pomodoro_svc.get_stats(db, "yesterday")


def test_sessions_by_task_and_task_delete(db):
    t = task_svc.create_task(db, "focus")
    s = pomodoro_svc.start_session(db, task_id=t.id)
    assert [x.id for x in pomodoro_svc.get_sessions_by_task(db, t.id)] == [s.id]
    task_svc.delete_task(db, t.id)
    kept = pomodoro_svc.list_sessions(db)
    assert [x.id for x in kept] == [s.id]
    assert kept[0].task_id is None


def test_cancel(db):
    s = pomodoro_svc.start_session(db)
    pomodoro_svc.cancel_session(db, s.id)
    assert pomodoro_svc.list_sessions(db) == []
    with pytest.raises(NotFoundError):
        pomodoro_svc.cancel_session(db, s.id)
