"""Row -> JSON dict shaping shared across routers."""
from typing import Optional

from agency_crm.api.deps import iso, money
from agency_crm.models.activity import Activity
from agency_crm.models.client import Client
from agency_crm.models.document import Document
from agency_crm.models.note import ClientNote
from agency_crm.models.policy import Policy


def client_name(client: Optional[Client]) -> Optional[str]:
    if client is None:
        return None
    return f"{client.first_name} {client.last_name}"


def client_brief(client: Optional[Client]) -> Optional[dict]:
    if client is None:
        return None
    return {"first_name": client.first_name, "last_name": client.last_name}


def client_to_dict(c: Client) -> dict:
    return {
        "id": c.id,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "email": c.email,
        "phone": c.phone,
        "address": c.address,
        "notes": c.notes,
        "created_at": iso(c.created_at),
        "updated_at": iso(c.updated_at),
    }


def policy_to_dict(p: Policy) -> dict:
    return {
        "id": p.id,
        "client_id": p.client_id,
        "carrier": p.carrier,
        "policy_number": p.policy_number,
        "type": p.type,
        "effective_date": iso(p.effective_date),
        "expiration_date": iso(p.expiration_date),
        "premium": money(p.premium),
        "details": p.details or {},
        "status": p.status,
        "created_at": iso(p.created_at),
        "updated_at": iso(p.updated_at),
    }


def activity_to_dict(a: Activity) -> dict:
    return {
        "id": a.id,
        "type": a.type,
        "description": a.description,
        "client_id": a.client_id,
        "policy_id": a.policy_id,
        "due_date": iso(a.due_date),
        "completed": bool(a.completed),
        "completed_at": iso(a.completed_at),
        "created_at": iso(a.created_at),
        "updated_at": iso(a.updated_at),
    }


def document_to_dict(d: Document) -> dict:
    return {
        "id": d.id,
        "client_id": d.client_id,
        "policy_id": d.policy_id,
        "file_name": d.file_name,
        "file_path": d.file_path,
        "file_size": d.file_size,
        "mime_type": d.mime_type,
        "uploaded_at": iso(d.uploaded_at),
    }


def note_to_dict(n: ClientNote) -> dict:
    return {
        "id": n.id,
        "client_id": n.client_id,
        "content": n.content,
        "created_at": iso(n.created_at),
        "updated_at": iso(n.updated_at),
    }
