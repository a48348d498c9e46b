from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from ..models.doctor import DoctorStatus

class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    specialty: str = Field(..., min_length=1, max_length=100)
    status: DoctorStatus = DoctorStatus.ACTIVE
    phone: str = ""
    experience: str = ""
    education: str = ""
    age: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    user_id: Optional[int] = None

class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    specialty: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[DoctorStatus] = None
    phone: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None

class DoctorResponse(BaseModel):
    id: int
    name: str
    email: str
    specialty: str
    status: DoctorStatus
    phone: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    age: Optional[int] = None
    image: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
