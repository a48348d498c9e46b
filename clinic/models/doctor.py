from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base
from .user import enum_values

class DoctorStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Directory information
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    specialty = Column(String(100), nullable=False, index=True)
    status = Column(
        SQLEnum(DoctorStatus, values_callable=enum_values),
        default=DoctorStatus.ACTIVE,
        index=True
    )

    # Professional information
    phone = Column(String(20), nullable=True)
    experience = Column(String(255), nullable=True)
    education = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    image = Column(Text, nullable=True)  # base64 or URL

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', specialty='{self.specialty}')>"
