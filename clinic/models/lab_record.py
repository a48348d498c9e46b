from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
import enum

from ..core.database import Base
from .user import enum_values

class LabRecordStatus(str, enum.Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    PROCESSING = "processing"

class LabRecord(Base):
    __tablename__ = "lab_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    test_name = Column(String(255), nullable=False)
    date = Column(String(20), nullable=False)
    category = Column(String(100), nullable=False)
    status = Column(
        SQLEnum(LabRecordStatus, values_callable=enum_values),
        nullable=False,
        default=LabRecordStatus.PENDING
    )
    result = Column(Text, nullable=True)
    # Display name of the ordering doctor
    doctor = Column(String(100), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<LabRecord(id={self.id}, patient_id={self.patient_id}, test='{self.test_name}')>"
