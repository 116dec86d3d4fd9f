from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from lokal.core.database import get_db
from lokal.deps import require_admin
from lokal.models.profile import UserProfile
from lokal.services import contracts, leads
from lokal.services.catalog import get_business

router = APIRouter(prefix="/api/admin", tags=["admin-contracts"])


class ContactIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None


class ContractCreate(BaseModel):
    business_id: str = Field(..., min_length=1)
    commission_percentage: float = Field(..., ge=0, le=100)
    status: str = "active"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    contact: ContactIn = Field(default_factory=ContactIn)


class UsagePayment(BaseModel):
    amount: float = Field(..., ge=0)
    date_paid: date


class LeadIn(BaseModel):
    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    location: Optional[str] = None
    contactStatus: Literal["new", "contacted", "signed_up"] = "new"


class LeadStatusUpdate(BaseModel):
    contactStatus: Literal["new", "contacted", "signed_up"]


@router.get("/contracts")
def list_contracts(
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return contracts.get_contracts(db)


@router.post("/contracts", status_code=status.HTTP_201_CREATED)
def create_contract(
    payload: ContractCreate,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if get_business(db, payload.business_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    contract_fields = payload.model_dump(exclude={"contact"})
    contract = contracts.add_contract(db, contract_fields, payload.contact.model_dump())
    if contract is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Error saving contract")
    return contract


@router.get("/usage")
def list_usage(
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return contracts.get_usage_details(db)


@router.post("/usage/{usage_id}/payment")
def mark_usage_paid(
    usage_id: str,
    payload: UsagePayment,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not contracts.update_usage_payment(db, usage_id, payload.amount, payload.date_paid):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usage record not found")
    return {"ok": True}


@router.get("/commissions/summary")
def commission_summary(
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return contracts.get_commission_summary(db)


@router.get("/leads")
def list_leads(
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return leads.get_leads(db)


@router.post("/leads", status_code=status.HTTP_201_CREATED)
def create_leads(
    payload: List[LeadIn],
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return leads.save_leads(db, [lead.model_dump() for lead in payload])


@router.patch("/leads/{lead_id}")
def update_lead(
    lead_id: str,
    payload: LeadStatusUpdate,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not leads.update_lead_status(db, lead_id, payload.contactStatus):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return {"ok": True, "contactStatus": payload.contactStatus}
