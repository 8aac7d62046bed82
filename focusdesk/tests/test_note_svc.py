from focusdesk.services import note_svc, project_svc


def test_create_then_get_roundtrip(db):
    note = note_svc.create_note(db, "Groceries", "milk, eggs")
    got = note_svc.get_note(db, note.id)
    assert got == note
    assert got.created_at == got.updated_at
    assert got.project_id is None


def test_get_missing_returns_none(db):
    assert note_svc.get_note(db, "nope") is None


def test_list_most_recently_updated_first(db):
    a = note_svc.create_note(db, "a", "")
    b = note_svc.create_note(db, "b", "")
    note_svc.update_note(db, a.id, title="a2")
    ids = [n.id for n in note_svc.list_notes(db)]
    assert ids == [a.id, b.id]


def test_search_title_or_content(db):
    note_svc.create_note(db, "Weekly review", "plan")
    note_svc.create_note(db, "Ideas", "review the backlog")
    note_svc.create_note(db, "Other", "nothing")
    titles = {n.title for n in note_svc.search_notes(db, "review")}
    assert titles == {"Weekly review", "Ideas"}


def test_search_treats_wildcards_literally(db):
    note_svc.create_note(db, "100% done", "")
    note_svc.create_note(db, "1000 done", "")
    assert [n.title for n in note_svc.search_notes(db, "100%")] == ["100% done"]
    assert note_svc.search_notes(db, "_") == []


def test_notes_by_project_and_project_delete_detaches(db):
    p = project_svc.create_project(db, "Home")
    n = note_svc.create_note(db, "Paint", "walls", project_id=p.id)
    assert [x.id for x in note_svc.get_notes_by_project(db, p.id)] == [n.id]

    project_svc.delete_project(db, p.id)
    kept = note_svc.get_note(db, n.id)
    assert kept is not None
    assert kept.project_id is None


def test_update_clears_project_with_empty_string(db):
    p = project_svc.create_project(db, "Home")
    n = note_svc.create_note(db, "Paint", "walls", project_id=p.id)
    assert note_svc.update_note(db, n.id, project_id="").project_id is None
