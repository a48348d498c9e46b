from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Text, JSON
from sqlalchemy.sql import func

from ..core.database import Base

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    # Owning account; profiles created by staff may not be linked yet
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Personal information
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True, index=True)
    date_of_birth = Column(Date, nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)
    height = Column(String(20), nullable=True)
    weight = Column(String(20), nullable=True)
    occupation = Column(String(100), nullable=True)
    marital_status = Column(String(20), nullable=True)
    image = Column(Text, nullable=True)

    # Contact information
    address = Column(String(255), nullable=True)
    emergency_contact = Column(String(100), nullable=True)
    emergency_phone = Column(String(20), nullable=True)
    insurance_provider = Column(String(100), nullable=True)
    insurance_number = Column(String(100), nullable=True)

    # Medical information
    blood_group = Column(String(5), nullable=True)
    medical_history = Column(JSON, nullable=False, default=list)
    allergies = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.name}')>"
