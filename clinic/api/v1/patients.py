from fastapi import APIRouter, Depends, status
from typing import List, Optional

from ...api.deps import get_bearer_token, get_pipeline
from ...core.store import ResourceType
from ...schemas.patient import (
    PatientCreate, PatientUpdate, PatientResponse, MedicalHistoryResponse
)
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.get("", response_model=List[PatientResponse])
def list_patients(
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """List all patients (doctors and admins)."""
    return pipeline.execute(token, Action.READ_MANY, ResourceType.PATIENT)

@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(token, Action.READ_ONE, ResourceType.PATIENT, patient_id)

@router.get("/{patient_id}/medical-history", response_model=MedicalHistoryResponse)
def get_medical_history(
    patient_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Medical history and allergies; same access rules as the profile."""
    return pipeline.execute(token, Action.READ_ONE, ResourceType.PATIENT, patient_id)

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    patient_data: PatientCreate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Create a patient profile; a patient's own profile is linked to their account."""
    return pipeline.execute(
        token, Action.CREATE, ResourceType.PATIENT, payload=patient_data.model_dump()
    )

@router.put("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    patient_data: PatientUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(
        token, Action.UPDATE_FIELDS, ResourceType.PATIENT, patient_id,
        payload=patient_data.model_dump(exclude_unset=True)
    )

@router.delete("/{patient_id}")
def delete_patient(
    patient_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Delete a patient profile (admins only)."""
    pipeline.execute(token, Action.DELETE, ResourceType.PATIENT, patient_id)
    return {"message": "Patient deleted successfully"}
