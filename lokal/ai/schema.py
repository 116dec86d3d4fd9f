from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DealCategory(str, Enum):
    FOOD = "food"
    RETAIL = "retail"
    SERVICE = "service"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    SIGNED_UP = "signed_up"


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    city: str


class GeneratedDeal(BaseModel):
    id: str
    businessName: str
    title: str
    description: str
    discount: str
    category: DealCategory
    distance: str = Field(..., description="e.g., 0.5 miles")
    code: str
    expiry: str
    website: str = Field(..., description="Full URL starting with http")


class GeneratedLead(BaseModel):
    id: str
    name: str
    type: str
    location: str
    contactStatus: Optional[LeadStatus] = None


class DealContent(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    discount: str
    code: str


class Place(BaseModel):
    title: str
    uri: Optional[str] = None
    address: Optional[str] = None
    source: str = "maps"


class OutreachEmail(BaseModel):
    text: str
    sources: list[dict] = Field(default_factory=list)
