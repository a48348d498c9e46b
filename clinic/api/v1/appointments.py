from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from ...api.deps import get_bearer_token, get_pipeline
from ...core.store import Contains, ResourceType
from ...schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentStatusUpdate, AppointmentResponse
)
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    doctor: Optional[str] = Query(None, description="Exact doctor name"),
    patient: Optional[int] = Query(None, description="Booking account id"),
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """
    List appointments visible to the caller.

    Patients only ever see their own bookings. Doctors see appointments under
    their own name unless they filter by doctor or patient explicitly.
    """
    return pipeline.execute(
        token, Action.READ_MANY, ResourceType.APPOINTMENT,
        query={"doctor": doctor, "patient_id": patient}
    )

@router.get("/doctor/{doctor_name}", response_model=List[AppointmentResponse])
def list_appointments_by_doctor(
    doctor_name: str,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Appointments whose doctor name contains ``doctor_name`` (case-insensitive)."""
    return pipeline.execute(
        token, Action.READ_MANY, ResourceType.APPOINTMENT,
        query={"doctor": Contains(doctor_name)}
    )

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(token, Action.READ_ONE, ResourceType.APPOINTMENT, appointment_id)

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Book an appointment; it starts out as scheduled."""
    return pipeline.execute(
        token, Action.CREATE, ResourceType.APPOINTMENT,
        payload=appointment_data.model_dump()
    )

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """
    Change an appointment's status.

    Patients may cancel their own appointments, doctors may set any status on
    appointments booked under their name, admins may set any status.
    """
    return pipeline.execute(
        token, Action.UPDATE_STATUS, ResourceType.APPOINTMENT, appointment_id,
        payload=status_data.model_dump()
    )

@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Edit appointment details (doctors and admins only)."""
    return pipeline.execute(
        token, Action.UPDATE_FIELDS, ResourceType.APPOINTMENT, appointment_id,
        payload=appointment_data.model_dump(exclude_unset=True)
    )

@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Permanently delete an appointment (admins only)."""
    pipeline.execute(token, Action.DELETE, ResourceType.APPOINTMENT, appointment_id)
    return {"message": "Appointment deleted successfully"}
