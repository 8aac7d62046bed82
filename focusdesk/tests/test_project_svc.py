import pytest

from focusdesk.errors import NotFoundError
from focusdesk.models import ProjectStats
from focusdesk.services import project_svc, task_svc


def test_create_defaults(db):
    p = project_svc.create_project(db, "Launch")
    assert p.color == "#3B82F6"
    assert p.is_archived is False
    assert project_svc.get_project(db, p.id) == p
    assert project_svc.get_project(db, "missing") is None


def test_archive_and_list_filter(db):
    a = project_svc.create_project(db, "a")
    b = project_svc.create_project(db, "b")
    assert project_svc.archive_project(db, a.id).is_archived is True
    assert {p.id for p in project_svc.list_projects(db)} == {a.id, b.id}
    assert [p.id for p in project_svc.list_projects(db, include_archived=False)] == [b.id]
    assert project_svc.unarchive_project(db, a.id).is_archived is False


def test_update_missing_project(db):
    with pytest.raises(NotFoundError):
        project_svc.update_project(db, "missing", name="x")


def test_stats(db):
    p = project_svc.create_project(db, "p")
    t1 = task_svc.create_task(db, "1", project_id=p.id)
    task_svc.create_task(db, "2", project_id=p.id)
    task_svc.create_task(db, "3", project_id=p.id)
    task_svc.toggle_task_complete(db, t1.id)
    assert project_svc.get_project_stats(db, p.id) == ProjectStats(total_tasks=3, completed_tasks=1, pending_tasks=2)
    assert project_svc.get_project_stats(db, "empty") == ProjectStats(0, 0, 0)


def test_delete_cascades_tasks(db):
    p = project_svc.create_project(db, "p")
    task_svc.create_task(db, "1", project_id=p.id)
    task_svc.create_task(db, "2", project_id=p.id)
    other = task_svc.create_task(db, "other")

    assert project_svc.delete_project(db, p.id) == 2
    assert task_svc.get_tasks_by_project(db, p.id) == []
    assert project_svc.get_project(db, p.id) is None
    assert task_svc.get_task(db, other.id) is not None

    with pytest.raises(NotFoundError):
        project_svc.delete_project(db, p.id)


def test_update_single_field_keeps_the_rest(db):
    p = project_svc.create_project(db, "Launch", description="v1", color="#FF0000")
    u = project_svc.update_project(db, p.id, description="v2")
    assert u.description == "v2"
    assert (u.name, u.color, u.is_archived, u.created_at) == ("Launch", "#FF0000", False, p.created_at)
    assert u.updated_at >= p.updated_at

    touched = project_svc.update_project(db, p.id)
    assert (touched.name, touched.description, touched.color) == ("Launch", "v2", "#FF0000")
