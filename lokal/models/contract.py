from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import relationship

from lokal.core.database import Base
from lokal.models._ids import new_id


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=new_id)
    business_id = Column(String(36), ForeignKey("businesses.id"), nullable=False, index=True)
    commission_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    business = relationship("Business")
    assignments = relationship("ContractAssignment", back_populates="contract", cascade="all, delete-orphan")


class ContractContact(Base):
    __tablename__ = "contract_contacts"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ContractAssignment(Base):
    __tablename__ = "contract_assignments"

    id = Column(String(36), primary_key=True, default=new_id)
    contract_id = Column(String(36), ForeignKey("contracts.id"), nullable=False, index=True)
    contact_id = Column(String(36), ForeignKey("contract_contacts.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="owner")

    contract = relationship("Contract", back_populates="assignments")
    contact = relationship("ContractContact")
