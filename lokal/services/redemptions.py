from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.models.consumer_usage import ConsumerUsageDetail
from lokal.models.deal import Deal
from lokal.models.profile import UserProfile
from lokal.models.redemption import Redemption
from lokal.services.contracts import get_contract_for_business

logger = logging.getLogger(__name__)

# Average spend per redemption used to turn a percentage into an amount owed
ASSUMED_BASKET_VALUE = 40
REDEMPTION_POINTS = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_commission_due(commission_percentage: Optional[Decimal | float | int]) -> float:
    if commission_percentage is None:
        return 0.0
    return float(Decimal(str(commission_percentage)) * ASSUMED_BASKET_VALUE / 100)


def format_deal_details(deal: Deal) -> str:
    return f"{deal.title} - {deal.discount}"


def _record_usage(db: Session, user_id: str, deal: Deal, email: Optional[str]) -> ConsumerUsageDetail:
    contract = get_contract_for_business(db, deal.business_id)
    commission_due = compute_commission_due(contract.commission_percentage if contract else None)

    usage = ConsumerUsageDetail(
        user_id=user_id,
        deal_id=deal.id,
        business_id=deal.business_id,
        deal_details=format_deal_details(deal),
        consumer_email=email,
        redeemed_at=utcnow(),
        commission_due=commission_due,
    )
    db.add(usage)
    db.commit()
    return usage


def _insert_redemption(db: Session, user_id: str, deal_id: str) -> Redemption:
    redemption = Redemption(user_id=user_id, deal_id=deal_id)
    db.add(redemption)
    db.commit()
    return redemption


def _award_points(db: Session, user_id: str) -> None:
    profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
    if profile is None:
        return
    profile.points = int(profile.points or 0) + REDEMPTION_POINTS
    db.commit()


def redeem_deal(db: Session, user_id: str, deal_id: str, email: Optional[str] = None) -> bool:
    """Records one redemption of ``deal_id`` by ``user_id``.

    The ledger row, the redemption event and the points update are committed
    one after another. A failure on the redemption insert leaves the ledger
    row in place. Every call awards points, including repeats of the same deal.
    """
    logger.info("[DB] Redeeming Deal: %s", deal_id)
    deal = db.query(Deal).filter(Deal.id == deal_id).first()
    if deal is None:
        logger.warning("[DB] Redemption for unknown deal: %s", deal_id)
        return False

    _record_usage(db, user_id, deal, email)

    try:
        _insert_redemption(db, user_id, deal.id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Redemption Error deal_id=%s: %s", deal_id, exc)
        return False

    _award_points(db, user_id)
    return True


def get_redemption_count(db: Session, user_id: str) -> int:
    return db.query(Redemption).filter(Redemption.user_id == user_id).count()
