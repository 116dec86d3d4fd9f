from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lokal.models.business import Business
from lokal.models.consumer_usage import ConsumerUsageDetail
from lokal.models.contract import Contract, ContractAssignment, ContractContact

logger = logging.getLogger(__name__)

OWNER_ROLE = "owner"
CONTRACT_FIELDS = ("business_id", "commission_percentage", "status", "start_date", "end_date")
CONTACT_FIELDS = ("name", "phone", "address", "email")


def _money(value: Optional[Decimal]) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _contact_to_dict(contact: ContractContact) -> dict[str, Any]:
    return {
        "id": contact.id,
        "name": contact.name,
        "phone": contact.phone,
        "address": contact.address,
        "email": contact.email,
    }


def _contract_to_dict(contract: Contract, business_name: Optional[str] = None) -> dict[str, Any]:
    owner = next(
        (assignment.contact for assignment in contract.assignments if assignment.role == OWNER_ROLE),
        None,
    )
    return {
        "id": contract.id,
        "business_id": contract.business_id,
        "business_name": business_name,
        "commission_percentage": _money(contract.commission_percentage),
        "status": contract.status,
        "start_date": contract.start_date.isoformat() if contract.start_date else None,
        "end_date": contract.end_date.isoformat() if contract.end_date else None,
        "created_at": contract.created_at.isoformat() if contract.created_at else None,
        "contact_info": _contact_to_dict(owner) if owner else None,
    }


def _usage_to_dict(usage: ConsumerUsageDetail) -> dict[str, Any]:
    return {
        "id": usage.id,
        "user_id": usage.user_id,
        "deal_id": usage.deal_id,
        "business_id": usage.business_id,
        "deal_details": usage.deal_details,
        "consumer_email": usage.consumer_email,
        "redeemed_at": usage.redeemed_at.isoformat() if usage.redeemed_at else None,
        "commission_due": _money(usage.commission_due) or 0.0,
        "amount_received": _money(usage.amount_received),
        "date_commission_was_paid": (
            usage.date_commission_was_paid.isoformat() if usage.date_commission_was_paid else None
        ),
    }


def get_contracts(db: Session) -> list[dict[str, Any]]:
    try:
        rows = (
            db.query(Contract, Business.name)
            .outerjoin(Business, Business.id == Contract.business_id)
            .order_by(Contract.created_at.desc())
            .all()
        )
        return [_contract_to_dict(contract, business_name) for contract, business_name in rows]
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching contracts: %s", exc)
        return []


def get_contract_for_business(db: Session, business_id: str) -> Optional[Contract]:
    return (
        db.query(Contract)
        .filter(Contract.business_id == business_id)
        .order_by(Contract.created_at.desc())
        .first()
    )


def _insert_contract(db: Session, fields: dict[str, Any]) -> Contract:
    contract = Contract(**{key: fields[key] for key in CONTRACT_FIELDS if fields.get(key) is not None})
    db.add(contract)
    db.commit()
    db.refresh(contract)
    return contract


def _insert_contact(db: Session, fields: dict[str, Any]) -> ContractContact:
    contact = ContractContact(**{key: fields.get(key) for key in CONTACT_FIELDS})
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def _link_contact(db: Session, contract: Contract, contact: ContractContact) -> ContractAssignment:
    assignment = ContractAssignment(contract_id=contract.id, contact_id=contact.id, role=OWNER_ROLE)
    db.add(assignment)
    db.commit()
    return assignment


def add_contract(
    db: Session,
    contract_fields: dict[str, Any],
    contact_fields: dict[str, Any],
) -> Optional[dict[str, Any]]:
    """Creates a contract, its owner contact, and the link between them.

    Each step commits on its own. When the contact or link step fails the
    contract is kept and returned without ``contact_info``.
    """
    logger.info("[DB] Adding Contract for business: %s", contract_fields.get("business_id"))
    try:
        contract = _insert_contract(db, contract_fields)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error adding contract: %s", exc)
        return None

    try:
        contact = _insert_contact(db, contact_fields)
        _link_contact(db, contract, contact)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error adding contract contact contract_id=%s: %s", contract.id, exc)

    db.refresh(contract)
    business = db.query(Business).filter(Business.id == contract.business_id).first()
    return _contract_to_dict(contract, business.name if business else None)


def get_usage_details(db: Session) -> list[dict[str, Any]]:
    try:
        rows = db.query(ConsumerUsageDetail).order_by(ConsumerUsageDetail.redeemed_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.error("[DB] Error fetching usage details: %s", exc)
        return []
    return [_usage_to_dict(usage) for usage in rows]


def update_usage_payment(db: Session, usage_id: str, amount: Decimal | float, date_paid: date) -> bool:
    """Marks a ledger row as paid. The amount is not checked against commission_due."""
    logger.info("[DB] Updating commission payment usage_id=%s", usage_id)
    try:
        updated = (
            db.query(ConsumerUsageDetail)
            .filter(ConsumerUsageDetail.id == usage_id)
            .update({"amount_received": amount, "date_commission_was_paid": date_paid})
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[DB] Error updating usage payment: %s", exc)
        return False
    return updated > 0


def get_commission_summary(db: Session) -> list[dict[str, Any]]:
    rows = (
        db.query(
            ConsumerUsageDetail.business_id,
            Business.name,
            func.count(ConsumerUsageDetail.id),
            func.coalesce(func.sum(ConsumerUsageDetail.commission_due), 0),
            func.coalesce(func.sum(ConsumerUsageDetail.amount_received), 0),
        )
        .outerjoin(Business, Business.id == ConsumerUsageDetail.business_id)
        .group_by(ConsumerUsageDetail.business_id, Business.name)
        .all()
    )
    summary = []
    for business_id, name, redemptions, total_due, total_received in rows:
        total_due = round(float(total_due or 0), 2)
        total_received = round(float(total_received or 0), 2)
        summary.append(
            {
                "business_id": business_id,
                "business_name": name,
                "redemptions": int(redemptions or 0),
                "commission_due": total_due,
                "amount_received": total_received,
                "outstanding": round(total_due - total_received, 2),
            }
        )
    summary.sort(key=lambda entry: entry["outstanding"], reverse=True)
    return summary
