from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, func

from lokal.core.database import Base
from lokal.models._ids import new_id


class ConsumerUsageDetail(Base):
    __tablename__ = "consumer_usage_details"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)
    deal_id = Column(String(36), ForeignKey("deals.id"), nullable=True, index=True)
    business_id = Column(String(36), nullable=True, index=True)
    deal_details = Column(String, nullable=False)
    consumer_email = Column(String, nullable=True)
    redeemed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    commission_due = Column(Numeric(10, 2), nullable=False, default=0)
    amount_received = Column(Numeric(10, 2), nullable=True)
    date_commission_was_paid = Column(Date, nullable=True)
