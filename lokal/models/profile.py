from sqlalchemy import Column, DateTime, Integer, String, func

from lokal.core.database import Base

ROLE_CONSUMER = "consumer"
ROLE_ADMIN = "admin"


class UserProfile(Base):
    __tablename__ = "profiles"

    # Same id as the hosted auth identity
    id = Column(String(36), primary_key=True)
    email = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_CONSUMER)
    points = Column(Integer, nullable=False, default=0)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
