from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models.lab_record import LabRecordStatus

class LabRecordCreate(BaseModel):
    patient_id: int
    test_name: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    status: LabRecordStatus = LabRecordStatus.PENDING
    result: Optional[str] = None
    # Defaults to the requesting doctor's name
    doctor: Optional[str] = None

class LabRecordUpdate(BaseModel):
    test_name: Optional[str] = Field(None, min_length=1)
    date: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    status: Optional[LabRecordStatus] = None
    result: Optional[str] = None
    doctor: Optional[str] = Field(None, min_length=1)

class LabRecordResponse(BaseModel):
    id: int
    patient_id: int
    test_name: str
    date: str
    category: str
    status: LabRecordStatus
    result: Optional[str] = None
    doctor: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
