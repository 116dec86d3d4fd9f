from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from lokal.core.database import get_db
from lokal.deps import get_current_identity, require_admin
from lokal.models.profile import UserProfile
from lokal.services import catalog
from lokal.services.identity import AuthIdentity

router = APIRouter(prefix="/api", tags=["catalog"])

Category = Literal["food", "retail", "service"]


class BusinessOut(BaseModel):
    id: str
    name: str
    type: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    website: Optional[str] = None
    imageUrl: Optional[str] = None
    is_active: bool
    ownerEmail: Optional[str] = None
    dealCount: int = 0


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    category: Category = "food"
    address: Optional[str] = None
    city: Optional[str] = None
    website: Optional[str] = None
    imageUrl: Optional[str] = None
    ownerEmail: Optional[str] = None


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    category: Optional[Category] = None
    address: Optional[str] = None
    city: Optional[str] = None
    website: Optional[str] = None
    imageUrl: Optional[str] = None
    is_active: Optional[bool] = None


class BusinessActive(BaseModel):
    is_active: bool


class DealOut(BaseModel):
    id: str
    business_id: str
    businessName: Optional[str] = None
    title: str
    description: Optional[str] = None
    discount: Optional[str] = None
    category: Optional[str] = None
    distance: Optional[str] = None
    imageUrl: Optional[str] = None
    code: Optional[str] = None
    expiry: Optional[str] = None
    website: Optional[str] = None
    is_active: Optional[bool] = None


class DealCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    discount: Optional[str] = None
    category: Optional[Category] = None
    distance: Optional[str] = None
    code: Optional[str] = None
    expiry: Optional[str] = None
    website: Optional[str] = None


class DealUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    discount: Optional[str] = None
    code: Optional[str] = None
    expiry: Optional[str] = None
    is_active: Optional[bool] = None


def _raise_store_error(messages: list[str], default: str) -> None:
    detail = messages[-1] if messages else default
    code = status.HTTP_403_FORBIDDEN if "permission" in detail.lower() else status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=detail)


@router.get("/deals", response_model=List[DealOut])
def list_deals(
    _identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return catalog.get_deals(db)


@router.get("/businesses", response_model=List[BusinessOut])
def list_businesses(
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return catalog.get_businesses(db)


@router.post("/admin/businesses", response_model=BusinessOut, status_code=status.HTTP_201_CREATED)
def create_business(
    payload: BusinessCreate,
    admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    messages: list[str] = []
    fields = payload.model_dump()
    fields["ownerEmail"] = fields.get("ownerEmail") or admin.email
    business = catalog.add_business(db, fields, notify=messages.append)
    if business is None:
        _raise_store_error(messages, "Error saving business")
    return business


@router.patch("/admin/businesses/{business_id}")
def update_business(
    business_id: str,
    payload: BusinessUpdate,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    messages: list[str] = []
    if not catalog.update_business(db, business_id, payload.model_dump(exclude_unset=True), notify=messages.append):
        if not messages:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
        _raise_store_error(messages, "Error updating business")
    return {"ok": True}


@router.post("/admin/businesses/{business_id}/active")
def set_business_active(
    business_id: str,
    payload: BusinessActive,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not catalog.soft_delete_business(db, business_id, payload.is_active):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    return {"ok": True, "is_active": payload.is_active}


@router.delete("/admin/businesses/{business_id}")
def delete_business(
    business_id: str,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    messages: list[str] = []
    if not catalog.delete_business(db, business_id, notify=messages.append):
        if not messages:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=messages[-1])
    return {"ok": True}


@router.get("/admin/businesses/{business_id}/deals", response_model=List[DealOut])
def list_business_deals(
    business_id: str,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return catalog.get_deals_by_business(db, business_id)


@router.post(
    "/admin/businesses/{business_id}/deals",
    response_model=DealOut,
    status_code=status.HTTP_201_CREATED,
)
def create_deal(
    business_id: str,
    payload: DealCreate,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    business = catalog.get_business(db, business_id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    fields = payload.model_dump()
    fields["business_id"] = business_id
    # Deals inherit the business category unless one is given
    fields["category"] = fields.get("category") or business.category
    fields["website"] = fields.get("website") or business.website

    messages: list[str] = []
    deal = catalog.add_deal(db, fields, notify=messages.append)
    if deal is None:
        _raise_store_error(messages, "Error saving deal")
    return deal


@router.patch("/admin/deals/{deal_id}")
def update_deal(
    deal_id: str,
    payload: DealUpdate,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not catalog.update_deal(db, deal_id, payload.model_dump(exclude_unset=True)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    return {"ok": True}


@router.delete("/admin/deals/{deal_id}")
def delete_deal(
    deal_id: str,
    _admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not catalog.delete_deal(db, deal_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deal not found")
    return {"ok": True}
