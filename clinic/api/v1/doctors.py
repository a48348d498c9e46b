from fastapi import APIRouter, Depends, status
from typing import List, Optional

from ...api.deps import get_bearer_token, get_pipeline
from ...core.store import Contains, ResourceType
from ...models.doctor import DoctorStatus
from ...schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/doctors", tags=["Doctors"])

# The directory is public: listing and lookups need no credential

@router.get("", response_model=List[DoctorResponse])
def list_doctors(pipeline: RequestPipeline = Depends(get_pipeline)):
    """List active doctors."""
    return pipeline.public_read(
        ResourceType.DOCTOR, query={"status": DoctorStatus.ACTIVE}
    )

@router.get("/specialty/{specialty}", response_model=List[DoctorResponse])
def list_doctors_by_specialty(
    specialty: str,
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Active doctors whose specialty contains ``specialty`` (case-insensitive)."""
    return pipeline.public_read(
        ResourceType.DOCTOR,
        query={"specialty": Contains(specialty), "status": DoctorStatus.ACTIVE}
    )

@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(
    doctor_id: int,
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.public_read(ResourceType.DOCTOR, doctor_id)

@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(
    doctor_data: DoctorCreate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(
        token, Action.CREATE, ResourceType.DOCTOR, payload=doctor_data.model_dump()
    )

@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Edit a directory entry (admins only)."""
    return pipeline.execute(
        token, Action.UPDATE_FIELDS, ResourceType.DOCTOR, doctor_id,
        payload=doctor_data.model_dump(exclude_unset=True)
    )

@router.delete("/{doctor_id}")
def deactivate_doctor(
    doctor_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Deactivate a doctor (admins only); the record is kept."""
    doctor = pipeline.execute(token, Action.DELETE, ResourceType.DOCTOR, doctor_id)
    return {
        "message": "Doctor deactivated successfully",
        "doctor": DoctorResponse.model_validate(doctor)
    }
