from fastapi import APIRouter, Depends, status
from typing import List, Optional

from ...api.deps import get_bearer_token, get_pipeline
from ...core.store import ResourceType
from ...schemas.lab_record import LabRecordCreate, LabRecordUpdate, LabRecordResponse
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/lab-records", tags=["Lab Records"])

@router.get("", response_model=List[LabRecordResponse])
def list_lab_records(
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """
    Lab records visible to the caller: a patient's own records, the records
    a doctor ordered, or everything for admins.
    """
    return pipeline.execute(token, Action.READ_MANY, ResourceType.LAB_RECORD)

@router.get("/{record_id}", response_model=LabRecordResponse)
def get_lab_record(
    record_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(token, Action.READ_ONE, ResourceType.LAB_RECORD, record_id)

@router.post("", response_model=LabRecordResponse, status_code=status.HTTP_201_CREATED)
def create_lab_record(
    record_data: LabRecordCreate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Create a lab record for a patient (doctors and admins)."""
    return pipeline.execute(
        token, Action.CREATE, ResourceType.LAB_RECORD, payload=record_data.model_dump()
    )

@router.put("/{record_id}", response_model=LabRecordResponse)
def update_lab_record(
    record_id: int,
    record_data: LabRecordUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(
        token, Action.UPDATE_FIELDS, ResourceType.LAB_RECORD, record_id,
        payload=record_data.model_dump(exclude_unset=True)
    )

@router.delete("/{record_id}")
def delete_lab_record(
    record_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    pipeline.execute(token, Action.DELETE, ResourceType.LAB_RECORD, record_id)
    return {"message": "Lab record deleted successfully"}
