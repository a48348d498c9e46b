from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Text, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base
from .user import enum_values

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Booking account
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Contact details
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)

    # Appointment details
    date = Column(String(20), nullable=False, index=True)
    time = Column(String(20), nullable=False)
    department = Column(String(100), nullable=False)
    # Doctor display name; ownership checks compare against this string
    doctor = Column(String(100), nullable=False, index=True)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Insurance and emergency contact
    insurance_provider = Column(String(100), nullable=True)
    insurance_number = Column(String(100), nullable=True)
    emergency_contact = Column(String(100), nullable=True)
    emergency_phone = Column(String(20), nullable=True)

    # Workflow
    status = Column(
        SQLEnum(AppointmentStatus, values_callable=enum_values),
        nullable=False,
        default=AppointmentStatus.SCHEDULED
    )
    completed = Column(Boolean, nullable=False, default=False)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor='{self.doctor}', status='{self.status}')>"
