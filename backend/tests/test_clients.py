import uuid
from decimal import Decimal

from conftest import make_client, make_policy, make_activity, make_document, make_note
from agency_crm.models import Activity, ClientNote, Document, Policy


def _create(client, headers, **overrides):
    body = {"first_name": "Sarah", "last_name": "Johnson", "email": "sarah.j@email.com"}
    body.update(overrides)
    return client.post("/api/clients", headers=headers, json=body)


def test_create_client(client, auth_headers):
    response = _create(client, auth_headers, phone="(555) 345-6789", address="")
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Client created successfully"
    data = body["data"]
    assert data["first_name"] == "Sarah"
    assert data["phone"] == "(555) 345-6789"
    assert data["address"] is None
    assert uuid.UUID(data["id"])


def test_create_client_requires_names(client, auth_headers):
    response = _create(client, auth_headers, first_name="  ")
    assert response.status_code == 400
    assert "First name is required" in response.json()["error"]


def test_create_client_rejects_bad_email(client, auth_headers):
    response = _create(client, auth_headers, email="not-an-email")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_duplicate_email_is_conflict(client, auth_headers):
    assert _create(client, auth_headers).status_code == 201
    response = _create(client, auth_headers, first_name="Other", email="SARAH.J@email.com")
    assert response.status_code == 409
    assert response.json()["error"] == "A client with this email already exists"


def test_same_email_allowed_in_other_agency(client, auth_headers, other_headers):
    assert _create(client, auth_headers).status_code == 201
    assert _create(client, other_headers).status_code == 201


def test_list_clients_with_policy_stats(client, db, agency, auth_headers):
    john = make_client(db, agency)
    make_policy(db, john, premium=Decimal("1000.50"))
    make_policy(db, john, policy_number="HOM-1", premium=Decimal("500"))
    make_policy(db, john, policy_number="OLD-1", status="cancelled", premium=Decimal("9999"))
    make_client(db, agency, first_name="Emily", last_name="Davis")

    body = client.get("/api/clients", headers=auth_headers).json()["data"]
    assert body["total"] == 2
    assert body["page"] == 1
    assert body["limit"] == 20
    assert body["totalPages"] == 1

    row = next(r for r in body["data"] if r["id"] == john.id)
    assert row["policy_count"] == 3
    assert row["active_policies"] == 2
    assert row["total_premium"] == 1500.5

    emily = next(r for r in body["data"] if r["id"] != john.id)
    assert emily["policy_count"] == 0
    assert emily["total_premium"] == 0


def test_list_clients_search_and_sort(client, db, agency, auth_headers):
    make_client(db, agency, first_name="Michael", last_name="Chen", email="mchen@techcorp.com")
    make_client(db, agency, first_name="Lisa", last_name="Anderson", phone="(555) 789-0123")
    make_client(db, agency, first_name="Robert", last_name="Wilson")

    by_email = client.get("/api/clients?search=TECHCORP", headers=auth_headers).json()["data"]
    assert [r["last_name"] for r in by_email["data"]] == ["Chen"]

    by_phone = client.get("/api/clients?search=789-01", headers=auth_headers).json()["data"]
    assert [r["last_name"] for r in by_phone["data"]] == ["Anderson"]

    sorted_rows = client.get(
        "/api/clients?sortBy=last_name&sortOrder=asc", headers=auth_headers
    ).json()["data"]["data"]
    assert [r["last_name"] for r in sorted_rows] == ["Anderson", "Chen", "Wilson"]


def test_search_treats_wildcards_literally(client, db, agency, auth_headers):
    make_client(db, agency, first_name="Ann", last_name="Lee")
    rows = client.get("/api/clients?search=%25", headers=auth_headers).json()["data"]["data"]
    assert rows == []


def test_list_clients_pagination(client, db, agency, auth_headers):
    for i in range(5):
        make_client(db, agency, first_name=f"Client{i}", last_name="Test")

    body = client.get("/api/clients?page=2&limit=2", headers=auth_headers).json()["data"]
    assert body["total"] == 5
    assert body["totalPages"] == 3
    assert len(body["data"]) == 2

    capped = client.get("/api/clients?limit=500", headers=auth_headers).json()["data"]
    assert capped["limit"] == 100


def test_list_only_shows_own_agency(client, db, agency, other_agency, auth_headers):
    make_client(db, agency)
    make_client(db, other_agency, first_name="Hidden")
    rows = client.get("/api/clients", headers=auth_headers).json()["data"]["data"]
    assert [r["first_name"] for r in rows] == ["John"]


def test_get_client_with_policies(client, db, agency, auth_headers):
    john = make_client(db, agency)
    make_policy(db, john, policy_number="LATE", days_to_expiry=200)
    make_policy(db, john, policy_number="EARLY", days_to_expiry=20)

    data = client.get(f"/api/clients/{john.id}", headers=auth_headers).json()["data"]
    assert data["first_name"] == "John"
    assert [p["policy_number"] for p in data["policies"]] == ["EARLY", "LATE"]
    assert data["policies"][0]["premium"] == 1200.0


def test_get_client_invalid_id(client, auth_headers):
    response = client.get("/api/clients/not-a-uuid", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid client ID format"


def test_get_client_missing_or_foreign(client, db, other_agency, auth_headers):
    response = client.get(f"/api/clients/{uuid.uuid4()}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Client not found"

    foreign = make_client(db, other_agency)
    assert client.get(f"/api/clients/{foreign.id}", headers=auth_headers).status_code == 404


def test_update_client(client, db, agency, auth_headers):
    john = make_client(db, agency, email="john@email.com")
    response = client.put(f"/api/clients/{john.id}", headers=auth_headers, json={"phone": "(555) 000-1111"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["phone"] == "(555) 000-1111"
    assert data["email"] == "john@email.com"
    assert data["first_name"] == "John"


def test_update_client_duplicate_email(client, db, agency, auth_headers):
    make_client(db, agency, first_name="Taken", email="taken@email.com")
    john = make_client(db, agency, email="john@email.com")
    response = client.put(f"/api/clients/{john.id}", headers=auth_headers, json={"email": "taken@email.com"})
    assert response.status_code == 409

    # Keeping your own email is fine
    same = client.put(f"/api/clients/{john.id}", headers=auth_headers, json={"email": "john@email.com"})
    assert same.status_code == 200


def test_update_foreign_client_is_not_found(client, db, other_agency, auth_headers):
    foreign = make_client(db, other_agency)
    response = client.put(f"/api/clients/{foreign.id}", headers=auth_headers, json={"phone": "1"})
    assert response.status_code == 404


def test_delete_client_cascades_and_unlinks(client, db, agency, auth_headers):
    john = make_client(db, agency)
    policy = make_policy(db, john)
    note = make_note(db, john)
    activity = make_activity(db, agency, client_id=john.id, policy_id=policy.id)
    document = make_document(db, agency, client_id=john.id, policy_id=policy.id)

    john_id, policy_id, note_id = john.id, policy.id, note.id
    activity_id, document_id = activity.id, document.id

    response = client.delete(f"/api/clients/{john_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Client deleted successfully"}

    db.expire_all()
    assert db.query(Policy).filter(Policy.id == policy_id).first() is None
    assert db.query(ClientNote).filter(ClientNote.id == note_id).first() is None
    remaining_activity = db.query(Activity).filter(Activity.id == activity_id).one()
    assert remaining_activity.client_id is None
    assert remaining_activity.policy_id is None
    remaining_document = db.query(Document).filter(Document.id == document_id).one()
    assert remaining_document.client_id is None
    assert remaining_document.policy_id is None

    assert client.get(f"/api/clients/{john_id}", headers=auth_headers).status_code == 404


def test_bad_query_params(client, auth_headers):
    bad_page = client.get("/api/clients?page=0", headers=auth_headers)
    assert bad_page.status_code == 400
    assert bad_page.json()["success"] is False

    unknown_sort = client.get("/api/clients?sortBy=hashed_password", headers=auth_headers)
    assert unknown_sort.status_code == 200


def test_get_client_by_upper_case_id(client, db, agency, auth_headers):
    john = make_client(db, agency)
    response = client.get(f"/api/clients/{john.id.upper()}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == john.id


def test_non_canonical_ids_are_rejected(client, db, agency, auth_headers):
    john = make_client(db, agency)
    compact = john.id.replace("-", "")
    for bad in (compact, "a" * 32, f"{{{john.id}}}", f"urn:uuid:{john.id}"):
        response = client.get(f"/api/clients/{bad}", headers=auth_headers)
        assert response.status_code == 400, bad
        assert response.json()["error"] == "Invalid client ID format"
