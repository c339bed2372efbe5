import uuid
from datetime import datetime, timedelta, timezone

from conftest import make_client, make_note


def test_create_and_list_notes(client, db, agency, auth_headers):
    john = make_client(db, agency)
    response = client.post("/api/notes", headers=auth_headers, json={
        "client_id": john.id, "content": "Wants a bundle quote",
    })
    assert response.status_code == 201
    assert response.json()["data"]["content"] == "Wants a bundle quote"

    data = client.get(f"/api/notes?client_id={john.id}", headers=auth_headers).json()["data"]
    assert [n["content"] for n in data] == ["Wants a bundle quote"]


def test_notes_newest_first(client, db, agency, auth_headers):
    john = make_client(db, agency)
    base = datetime(2026, 3, 1, tzinfo=timezone.utc)
    make_note(db, john, content="first", created_at=base)
    make_note(db, john, content="third", created_at=base + timedelta(days=2))
    make_note(db, john, content="second", created_at=base + timedelta(days=1))

    data = client.get(f"/api/notes?client_id={john.id}", headers=auth_headers).json()["data"]
    assert [n["content"] for n in data] == ["third", "second", "first"]


def test_list_notes_requires_client_id(client, auth_headers):
    missing = client.get("/api/notes", headers=auth_headers)
    assert missing.status_code == 400
    assert missing.json()["error"] == "client_id is required"

    invalid = client.get("/api/notes?client_id=abc", headers=auth_headers)
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Invalid client ID format"


def test_notes_are_tenant_scoped(client, db, other_agency, auth_headers):
    foreign = make_client(db, other_agency)
    make_note(db, foreign, content="private")

    assert client.get(f"/api/notes?client_id={foreign.id}", headers=auth_headers).json()["data"] == []

    response = client.post("/api/notes", headers=auth_headers, json={
        "client_id": foreign.id, "content": "hello",
    })
    assert response.status_code == 404
    assert response.json()["error"] == "Client not found"


def test_create_note_validation(client, db, agency, auth_headers):
    john = make_client(db, agency)
    empty = client.post("/api/notes", headers=auth_headers, json={"client_id": john.id, "content": ""})
    assert empty.status_code == 400
    assert "Content is required" in empty.json()["error"]

    no_client = client.post("/api/notes", headers=auth_headers, json={"content": "x"})
    assert no_client.status_code == 400


def test_update_and_delete_note(client, db, agency, auth_headers):
    note = make_note(db, make_client(db, agency))
    note_id = note.id

    updated = client.put(f"/api/notes/{note_id}", headers=auth_headers, json={"content": "Edited"})
    assert updated.status_code == 200
    assert updated.json()["data"]["content"] == "Edited"

    deleted = client.delete(f"/api/notes/{note_id}", headers=auth_headers)
    assert deleted.json() == {"success": True, "message": "Note deleted successfully"}
    assert client.delete(f"/api/notes/{note_id}", headers=auth_headers).status_code == 404


def test_note_lookup_errors(client, auth_headers):
    bad = client.put("/api/notes/nope", headers=auth_headers, json={"content": "x"})
    assert bad.status_code == 400
    assert bad.json()["error"] == "Invalid note ID format"

    missing = client.delete(f"/api/notes/{uuid.uuid4()}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Note not found"


def test_list_notes_with_upper_case_client_id(client, db, agency, auth_headers):
    john = make_client(db, agency)
    make_note(db, john, content="hello")
    data = client.get(f"/api/notes?client_id={john.id.upper()}", headers=auth_headers).json()["data"]
    assert [n["content"] for n in data] == ["hello"]
