"""Deletes that have to keep loose references consistent.

Activities and documents outlive the client or policy they point at; their
links are cleared rather than the rows being removed.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from agency_crm.models.activity import Activity
from agency_crm.models.client import Client
from agency_crm.models.document import Document
from agency_crm.models.policy import Policy

logger = logging.getLogger(__name__)


def _unlink_policies(db: Session, agency_id: str, policy_ids: List[str]) -> None:
    if not policy_ids:
        return
    for model in (Activity, Document):
        db.query(model).filter(
            model.agency_id == agency_id,
            model.policy_id.in_(policy_ids),
        ).update({model.policy_id: None}, synchronize_session=False)


def delete_policy(db: Session, policy: Policy) -> None:
    _unlink_policies(db, policy.agency_id, [policy.id])
    db.delete(policy)
    db.commit()
    logger.info(f"Deleted policy {policy.id}")


def delete_client(db: Session, client: Client) -> None:
    """Delete a client with its policies and notes."""
    policy_ids = [p.id for p in client.policies]
    _unlink_policies(db, client.agency_id, policy_ids)
    for model in (Activity, Document):
        db.query(model).filter(
            model.agency_id == client.agency_id,
            model.client_id == client.id,
        ).update({model.client_id: None}, synchronize_session=False)
    db.delete(client)
    db.commit()
    logger.info(f"Deleted client {client.id} with {len(policy_ids)} policies")
