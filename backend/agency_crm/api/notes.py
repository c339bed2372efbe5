"""Client notes API."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from agency_crm.api.deps import ok, get_owned_or_404, require_uuid
from agency_crm.api.serializers import note_to_dict
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.client import Client
from agency_crm.models.note import ClientNote
from agency_crm.schemas.note import NoteCreate, NoteUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("")
def list_notes(
    client_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All notes for a client, newest first."""
    if not client_id:
        raise HTTPException(status_code=400, detail="client_id is required")
    client_id = require_uuid(client_id, "client")

    notes = (
        db.query(ClientNote)
        .filter(
            ClientNote.agency_id == current_user.agency_id,
            ClientNote.client_id == client_id,
        )
        .order_by(ClientNote.created_at.desc(), ClientNote.id)
        .all()
    )
    return ok([note_to_dict(n) for n in notes])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_note(
    payload: NoteCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    client = db.query(Client).filter(
        Client.id == payload.client_id,
        Client.agency_id == current_user.agency_id,
    ).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    note = ClientNote(
        agency_id=current_user.agency_id,
        client_id=client.id,
        content=payload.content,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return ok(note_to_dict(note), "Note created successfully")


@router.put("/{note_id}")
def update_note(
    note_id: str,
    payload: NoteUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    note = get_owned_or_404(db, ClientNote, note_id, current_user.agency_id, "Note")
    note.content = payload.content
    db.commit()
    db.refresh(note)
    return ok(note_to_dict(note), "Note updated successfully")


@router.delete("/{note_id}")
def delete_note(
    note_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    note = get_owned_or_404(db, ClientNote, note_id, current_user.agency_id, "Note")
    db.delete(note)
    db.commit()
    return ok(message="Note deleted successfully")
