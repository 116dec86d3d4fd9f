from sqlalchemy import Column, DateTime, String, func

from lokal.core.database import Base
from lokal.models._ids import new_id

LEAD_STATUSES = {"new", "contacted", "signed_up"}


class BusinessLead(Base):
    __tablename__ = "business_leads"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    contact_status = Column(String(20), nullable=False, default="new")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
