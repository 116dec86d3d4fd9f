from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from lokal.core.database import Base
from lokal.models._ids import new_id


class Deal(Base):
    __tablename__ = "deals"

    id = Column(String(36), primary_key=True, default=new_id)
    business_id = Column(String(36), ForeignKey("businesses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    discount = Column(String, nullable=True)
    category = Column(String(20), nullable=True)
    distance = Column(String, nullable=True)
    code = Column(String(64), nullable=True)
    expiry = Column(String, nullable=True)
    website = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    business = relationship("Business", back_populates="deals")
