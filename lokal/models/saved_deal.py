from sqlalchemy import Column, DateTime, ForeignKey, String, func

from lokal.core.database import Base
from lokal.models._ids import new_id


class SavedDeal(Base):
    __tablename__ = "saved_deals"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)
    deal_id = Column(String(36), ForeignKey("deals.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
