import pytest

from focusdesk.errors import ValidationError
from focusdesk.models import PomodoroSettings
from focusdesk.services import settings_svc


def test_defaults(db):
    assert settings_svc.get_settings(db) == PomodoroSettings(25, 5, 15)


def test_defaults_do_not_overwrite(db):
    settings_svc.update_settings(db, short_break_minutes=10)
    settings_svc.ensure_default_settings(db)
    assert settings_svc.get_settings(db).short_break_minutes == 10


def test_rejects_non_positive(db):
    with pytest.raises(ValidationError):
        settings_svc.update_settings(db, long_break_minutes=0)
    assert settings_svc.get_settings(db).long_break_minutes == 15
