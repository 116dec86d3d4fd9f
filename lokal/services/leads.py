from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.models.business_lead import LEAD_STATUSES, BusinessLead

logger = logging.getLogger(__name__)


def normalize_lead_status(status: str | None) -> str:
    value = (status or "new").strip().lower()
    if value not in LEAD_STATUSES:
        raise ValueError("Invalid lead status")
    return value


def _lead_to_dict(lead: BusinessLead) -> dict[str, Any]:
    return {
        "id": lead.id,
        "name": lead.name,
        "type": lead.type,
        "location": lead.location,
        "contactStatus": lead.contact_status,
    }


def get_leads(db: Session) -> list[dict[str, Any]]:
    leads = db.query(BusinessLead).order_by(BusinessLead.created_at.desc()).all()
    return [_lead_to_dict(lead) for lead in leads]


def save_leads(db: Session, leads: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Persists AI-suggested leads. Ids generated by the model are not reused."""
    rows = [
        BusinessLead(
            name=lead["name"],
            type=lead.get("type"),
            location=lead.get("location"),
            contact_status=normalize_lead_status(lead.get("contactStatus")),
        )
        for lead in leads
    ]
    if not rows:
        return []
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error saving leads: %s", exc)
        return []
    for row in rows:
        db.refresh(row)
    return [_lead_to_dict(row) for row in rows]


def update_lead_status(db: Session, lead_id: str, status: str) -> bool:
    normalized = normalize_lead_status(status)
    try:
        updated = db.query(BusinessLead).filter(BusinessLead.id == lead_id).update({"contact_status": normalized})
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error updating lead status lead_id=%s: %s", lead_id, exc)
        return False
    return updated > 0
