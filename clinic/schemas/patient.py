from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

BloodGroup = Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
Gender = Literal["Male", "Female", "Other"]
MaritalStatus = Literal["Single", "Married", "Divorced", "Widowed", "Other"]

class PatientFields(BaseModel):
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    blood_group: Optional[BloodGroup] = None
    gender: Optional[Gender] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    occupation: Optional[str] = None
    marital_status: Optional[MaritalStatus] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    image: Optional[str] = None

class PatientCreate(PatientFields):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    medical_history: List[str] = []
    allergies: List[str] = []
    # Linking account; ignored when a patient creates their own profile
    user_id: Optional[int] = None

class PatientUpdate(PatientFields):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    medical_history: Optional[List[str]] = None
    allergies: Optional[List[str]] = None

class PatientResponse(PatientFields):
    id: int
    name: str
    email: str
    medical_history: List[str] = []
    allergies: List[str] = []
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MedicalHistoryResponse(BaseModel):
    medical_history: List[str] = []
    allergies: List[str] = []

    class Config:
        from_attributes = True
