import uuid

from conftest import make_client, make_policy, make_activity, utc_in


def test_create_activity(client, db, agency, auth_headers):
    john = make_client(db, agency)
    policy = make_policy(db, john)
    response = client.post("/api/activities", headers=auth_headers, json={
        "type": "call",
        "description": "Discuss auto renewal",
        "client_id": john.id,
        "policy_id": policy.id,
        "due_date": "2026-11-01T15:00:00Z",
    })
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["completed"] is False
    assert data["completed_at"] is None
    assert data["due_date"].startswith("2026-11-01T15:00:00")
    assert data["policy_id"] == policy.id


def test_create_activity_validation(client, auth_headers):
    missing = client.post("/api/activities", headers=auth_headers, json={"type": "call", "description": " "})
    assert missing.status_code == 400
    assert "Description is required" in missing.json()["error"]

    bad_type = client.post("/api/activities", headers=auth_headers, json={"type": "fax", "description": "x"})
    assert bad_type.status_code == 400

    bad_link = client.post("/api/activities", headers=auth_headers, json={
        "type": "task", "description": "x", "client_id": "abc",
    })
    assert bad_link.status_code == 400
    assert "Invalid client ID" in bad_link.json()["error"]


def test_create_activity_linked_to_foreign_rows(client, db, other_agency, auth_headers):
    foreign = make_client(db, other_agency)
    response = client.post("/api/activities", headers=auth_headers, json={
        "type": "task", "description": "Sneaky", "client_id": foreign.id,
    })
    assert response.status_code == 404
    assert response.json()["error"] == "Client not found"

    response = client.post("/api/activities", headers=auth_headers, json={
        "type": "task", "description": "Sneaky", "policy_id": str(uuid.uuid4()),
    })
    assert response.status_code == 404
    assert response.json()["error"] == "Policy not found"


def test_list_activities_default_sort_and_client_name(client, db, agency, auth_headers):
    john = make_client(db, agency)
    make_activity(db, agency, description="No date")
    make_activity(db, agency, description="Later", due_date=utc_in(days=3), client_id=john.id)
    make_activity(db, agency, description="Sooner", due_date=utc_in(days=1))

    rows = client.get("/api/activities", headers=auth_headers).json()["data"]["data"]
    assert [r["description"] for r in rows] == ["Sooner", "Later", "No date"]
    assert rows[1]["client_name"] == "John Martinez"
    assert rows[0]["client_name"] is None


def test_list_activities_filters(client, db, agency, auth_headers):
    john = make_client(db, agency)
    make_activity(db, agency, description="Open call", client_id=john.id)
    make_activity(db, agency, description="Done email", type="email", completed=True)

    done = client.get("/api/activities?completed=true", headers=auth_headers).json()["data"]["data"]
    assert [r["description"] for r in done] == ["Done email"]

    open_rows = client.get("/api/activities?completed=false", headers=auth_headers).json()["data"]["data"]
    assert [r["description"] for r in open_rows] == ["Open call"]

    emails = client.get("/api/activities?type=email", headers=auth_headers).json()["data"]["data"]
    assert [r["description"] for r in emails] == ["Done email"]

    mine = client.get(f"/api/activities?client_id={john.id}", headers=auth_headers).json()["data"]["data"]
    assert [r["description"] for r in mine] == ["Open call"]


def test_upcoming_activities(client, db, agency, other_agency, auth_headers):
    make_activity(db, agency, description="Overdue", due_date=utc_in(days=-2))
    make_activity(db, agency, description="This week", due_date=utc_in(days=3))
    make_activity(db, agency, description="Next month", due_date=utc_in(days=30))
    make_activity(db, agency, description="Finished", due_date=utc_in(days=1), completed=True)
    make_activity(db, agency, description="Undated")
    make_activity(db, other_agency, description="Foreign", due_date=utc_in(days=1))

    data = client.get("/api/activities/upcoming", headers=auth_headers).json()["data"]
    assert [a["description"] for a in data] == ["Overdue", "This week"]

    wider = client.get("/api/activities/upcoming?days=45", headers=auth_headers).json()["data"]
    assert [a["description"] for a in wider] == ["Overdue", "This week", "Next month"]


def test_complete_and_reopen_activity(client, db, agency, auth_headers):
    activity = make_activity(db, agency)

    done = client.put(f"/api/activities/{activity.id}", headers=auth_headers, json={"completed": True})
    assert done.status_code == 200
    data = done.json()["data"]
    assert data["completed"] is True
    assert data["completed_at"] is not None

    reopened = client.put(f"/api/activities/{activity.id}", headers=auth_headers, json={"completed": False})
    data = reopened.json()["data"]
    assert data["completed"] is False
    assert data["completed_at"] is None


def test_update_activity_fields(client, db, agency, auth_headers):
    activity = make_activity(db, agency)
    response = client.put(f"/api/activities/{activity.id}", headers=auth_headers, json={
        "description": "Left voicemail",
        "type": "note",
    })
    data = response.json()["data"]
    assert data["description"] == "Left voicemail"
    assert data["type"] == "note"
    assert data["completed"] is False


def test_activity_lookup_errors(client, db, other_agency, auth_headers):
    assert client.get("/api/activities/xyz", headers=auth_headers).json()["error"] == "Invalid activity ID format"
    assert client.get(f"/api/activities/{uuid.uuid4()}", headers=auth_headers).json()["error"] == "Activity not found"

    foreign = make_activity(db, other_agency)
    assert client.put(f"/api/activities/{foreign.id}", headers=auth_headers, json={"completed": True}).status_code == 404
    assert client.delete(f"/api/activities/{foreign.id}", headers=auth_headers).status_code == 404


def test_delete_activity(client, db, agency, auth_headers):
    activity = make_activity(db, agency)
    activity_id = activity.id
    response = client.delete(f"/api/activities/{activity_id}", headers=auth_headers)
    assert response.json() == {"success": True, "message": "Activity deleted successfully"}
    assert client.get(f"/api/activities/{activity_id}", headers=auth_headers).status_code == 404


def test_upcoming_window_is_bounded(client, auth_headers):
    response = client.get("/api/activities/upcoming?days=10000000", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["success"] is False
