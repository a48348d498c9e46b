from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from ..models.appointment import AppointmentStatus

class AppointmentBase(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    doctor: str = Field(..., min_length=1)
    reason: Optional[str] = None
    notes: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None

class AppointmentCreate(AppointmentBase):
    """
    Booking form.

    ``patient_id`` is taken from the caller; only admins may book on behalf
    of another account.
    """
    patient_id: Optional[int] = None

class AppointmentUpdate(BaseModel):
    """Full-record edit by doctors and admins; every field optional."""
    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    date: Optional[str] = Field(None, min_length=1)
    time: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = Field(None, min_length=1)
    doctor: Optional[str] = Field(None, min_length=1)
    reason: Optional[str] = None
    notes: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    status: Optional[AppointmentStatus] = None

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class AppointmentResponse(AppointmentBase):
    id: int
    patient_id: int
    email: str
    status: AppointmentStatus
    completed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
