from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import relationship

from lokal.core.database import Base
from lokal.models._ids import new_id

BUSINESS_CATEGORIES = {"food", "retail", "service"}


class Business(Base):
    __tablename__ = "businesses"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    category = Column(String(20), nullable=False, default="food")
    type = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    website = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    owner_email = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    deals = relationship("Deal", back_populates="business")
