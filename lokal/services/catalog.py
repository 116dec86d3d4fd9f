from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.core import config
from lokal.models.business import Business
from lokal.models.deal import Deal

logger = logging.getLogger(__name__)

Notify = Optional[Callable[[str], None]]

# Seed rows shipped with the demo SQL script; hidden unless mock data is enabled
TEST_BUSINESS_IDS = (
    "b1000000-0000-0000-0000-000000000001",
    "b1000000-0000-0000-0000-000000000002",
    "b1000000-0000-0000-0000-000000000003",
    "b1000000-0000-0000-0000-000000000004",
    "b1000000-0000-0000-0000-000000000005",
)

DEFAULT_BUSINESS_NAME = "Local Business"
DEFAULT_FEED_DISTANCE = "0.5 miles"

# API field -> column
BUSINESS_FIELD_MAP = {
    "name": "name",
    "type": "type",
    "category": "category",
    "address": "address",
    "city": "city",
    "website": "website",
    "imageUrl": "image_url",
    "ownerEmail": "owner_email",
}
DEAL_FIELD_MAP = {
    "business_id": "business_id",
    "title": "title",
    "description": "description",
    "discount": "discount",
    "category": "category",
    "distance": "distance",
    "code": "code",
    "expiry": "expiry",
    "website": "website",
}
DEAL_PATCHABLE_FIELDS = ("title", "description", "discount", "code", "expiry")


def should_show_mocks() -> bool:
    return bool(config.ENABLE_MOCK_DATA)


def _surface(notify: Notify, message: str) -> None:
    if notify is not None:
        notify(message)


def _is_permission_error(message: str) -> bool:
    lowered = message.lower()
    return "row-level security" in lowered or "permission denied" in lowered


def _business_to_dict(business: Business, deal_count: int = 0) -> dict[str, Any]:
    return {
        "id": business.id,
        "name": business.name,
        "type": business.type,
        "category": business.category,
        "address": business.address,
        "city": business.city,
        "website": business.website,
        "imageUrl": business.image_url,
        "is_active": business.is_active,
        "ownerEmail": business.owner_email,
        "dealCount": int(deal_count or 0),
    }


def deal_to_dict(
    deal: Deal,
    *,
    business_name: Optional[str] = None,
    image_url: Optional[str] = None,
    default_distance: Optional[str] = None,
) -> dict[str, Any]:
    return {
        "id": deal.id,
        "business_id": deal.business_id,
        "businessName": business_name if business_name is not None else DEFAULT_BUSINESS_NAME,
        "title": deal.title,
        "description": deal.description,
        "discount": deal.discount,
        "category": deal.category,
        "distance": deal.distance or default_distance,
        "imageUrl": image_url,
        "code": deal.code,
        "expiry": deal.expiry,
        "website": deal.website,
        "is_active": deal.is_active,
    }


# --- Businesses ---


def get_businesses(db: Session) -> list[dict[str, Any]]:
    logger.info("[DB] Fetching Businesses...")
    deal_counts = (
        db.query(Deal.business_id, func.count(Deal.id).label("deal_count"))
        .group_by(Deal.business_id)
        .subquery()
    )
    try:
        rows = (
            db.query(Business, func.coalesce(deal_counts.c.deal_count, 0))
            .outerjoin(deal_counts, deal_counts.c.business_id == Business.id)
            .order_by(Business.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching businesses: %s", exc)
        return []

    businesses = [_business_to_dict(business, deal_count) for business, deal_count in rows]
    if not should_show_mocks():
        businesses = [business for business in businesses if business["id"] not in TEST_BUSINESS_IDS]
    return businesses


def get_business(db: Session, business_id: str) -> Optional[Business]:
    return db.query(Business).filter(Business.id == business_id).first()


def add_business(db: Session, fields: dict[str, Any], notify: Notify = None) -> Optional[dict[str, Any]]:
    logger.info("[DB] Adding Business: %s", fields.get("name"))
    payload = {column: fields.get(key) for key, column in BUSINESS_FIELD_MAP.items() if fields.get(key) is not None}
    business = Business(**payload, is_active=True)
    try:
        db.add(business)
        db.commit()
        db.refresh(business)
    except SQLAlchemyError as exc:
        db.rollback()
        message = str(getattr(exc, "orig", None) or exc)
        logger.error("[DB] Error adding business: %s", message)
        if _is_permission_error(message):
            _surface(notify, "Database permission error: the row-level security policies for businesses are missing.")
        else:
            _surface(notify, f"Error saving business: {message}")
        return None
    return _business_to_dict(business, 0)


def update_business(db: Session, business_id: str, updates: dict[str, Any], notify: Notify = None) -> bool:
    logger.info("[DB] Updating Business: %s", business_id)
    patch: dict[str, Any] = {}
    for key, column in BUSINESS_FIELD_MAP.items():
        if updates.get(key):
            patch[column] = updates[key]
    if updates.get("is_active") is not None:
        patch["is_active"] = bool(updates["is_active"])
    if not patch:
        return True

    try:
        updated = db.query(Business).filter(Business.id == business_id).update(patch)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error updating business: %s", exc)
        _surface(notify, f"Error updating business: {exc}")
        return False
    return updated > 0


def soft_delete_business(db: Session, business_id: str, is_active: bool) -> bool:
    logger.info("[DB] Soft Delete Business: %s (Active: %s)", business_id, is_active)
    return update_business(db, business_id, {"is_active": is_active})


def delete_business(db: Session, business_id: str, notify: Notify = None) -> bool:
    """Hard delete. The store refuses it while deals still reference the business."""
    logger.info("[DB] Hard Delete Business: %s", business_id)
    try:
        deleted = db.query(Business).filter(Business.id == business_id).delete(synchronize_session=False)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("[DB] Error deleting business: %s", exc)
        _surface(notify, "Error deleting business (ensure all deals are deleted first).")
        return False
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error deleting business: %s", exc)
        _surface(notify, f"Error deleting business: {exc}")
        return False
    return deleted > 0


# --- Deals ---


def get_deals(db: Session) -> list[dict[str, Any]]:
    """Active deals for the consumer feed, with name and image taken from the business."""
    logger.info("[DB] Fetching Deals...")
    try:
        rows = (
            db.query(Deal, Business.name, Business.image_url)
            .outerjoin(Business, Business.id == Deal.business_id)
            .filter(Deal.is_active.is_(True))
            .order_by(Deal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching deals: %s", exc)
        return []

    deals = [
        deal_to_dict(deal, business_name=name, image_url=image_url, default_distance=DEFAULT_FEED_DISTANCE)
        for deal, name, image_url in rows
    ]
    if not should_show_mocks():
        deals = [deal for deal in deals if deal["business_id"] not in TEST_BUSINESS_IDS]
    return deals


def get_deal(db: Session, deal_id: str) -> Optional[Deal]:
    return db.query(Deal).filter(Deal.id == deal_id).first()


def get_deals_by_business(db: Session, business_id: str) -> list[dict[str, Any]]:
    logger.info("[DB] Fetching Deals for Business: %s", business_id)
    try:
        rows = (
            db.query(Deal, Business.image_url)
            .outerjoin(Business, Business.id == Deal.business_id)
            .filter(Deal.business_id == business_id)
            .order_by(Deal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching business deals: %s", exc)
        return []
    return [deal_to_dict(deal, business_name="", image_url=image_url) for deal, image_url in rows]


def add_deal(db: Session, fields: dict[str, Any], notify: Notify = None) -> Optional[dict[str, Any]]:
    logger.info("[DB] Adding Deal: %s", fields.get("title"))
    payload = {column: fields.get(key) for key, column in DEAL_FIELD_MAP.items() if fields.get(key) is not None}
    deal = Deal(**payload, is_active=True)
    try:
        db.add(deal)
        db.commit()
        db.refresh(deal)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error adding deal: %s", exc)
        _surface(notify, f"Error saving deal: {getattr(exc, 'orig', None) or exc}")
        return None

    business = get_business(db, deal.business_id)
    return deal_to_dict(
        deal,
        business_name=fields.get("businessName") or (business.name if business else None),
        image_url=business.image_url if business else None,
    )


def update_deal(db: Session, deal_id: str, updates: dict[str, Any]) -> bool:
    logger.info("[DB] Updating Deal: %s", deal_id)
    patch: dict[str, Any] = {key: updates[key] for key in DEAL_PATCHABLE_FIELDS if updates.get(key)}
    if updates.get("is_active") is not None:
        patch["is_active"] = bool(updates["is_active"])
    if not patch:
        return True

    try:
        updated = db.query(Deal).filter(Deal.id == deal_id).update(patch)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error updating deal: %s", exc)
        return False
    return updated > 0


def delete_deal(db: Session, deal_id: str) -> bool:
    logger.info("[DB] Deleting Deal: %s", deal_id)
    try:
        deleted = db.query(Deal).filter(Deal.id == deal_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error deleting deal: %s", exc)
        return False
    return deleted > 0
