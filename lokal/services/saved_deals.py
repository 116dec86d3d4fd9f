from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.models.business import Business
from lokal.models.deal import Deal
from lokal.models.saved_deal import SavedDeal
from lokal.services.catalog import deal_to_dict

logger = logging.getLogger(__name__)

SAVED_DEAL_DISTANCE = "Varies"


def _find_saved(db: Session, user_id: str, deal_id: str) -> SavedDeal | None:
    return (
        db.query(SavedDeal)
        .filter(SavedDeal.user_id == user_id, SavedDeal.deal_id == deal_id)
        .first()
    )


def get_saved_deals(db: Session, user_id: str) -> list[dict[str, Any]]:
    try:
        rows = (
            db.query(Deal, Business.name, Business.image_url)
            .join(SavedDeal, SavedDeal.deal_id == Deal.id)
            .outerjoin(Business, Business.id == Deal.business_id)
            .filter(SavedDeal.user_id == user_id)
            .order_by(SavedDeal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching saved deals user_id=%s: %s", user_id, exc)
        return []
    return [
        deal_to_dict(deal, business_name=name, image_url=image_url, default_distance=SAVED_DEAL_DISTANCE)
        for deal, name, image_url in rows
    ]


def toggle_save_deal(db: Session, user_id: str, deal_id: str) -> bool:
    """Saves the deal if it is not saved yet, otherwise removes it.

    Returns the new saved state. Read-then-write, so two concurrent toggles
    for the same pair can both see the same starting state.
    """
    existing = _find_saved(db, user_id, deal_id)
    if existing:
        db.delete(existing)
        db.commit()
        return False

    db.add(SavedDeal(user_id=user_id, deal_id=deal_id))
    db.commit()
    return True


def is_deal_saved(db: Session, user_id: str, deal_id: str) -> bool:
    return _find_saved(db, user_id, deal_id) is not None
