from fastapi import APIRouter, Depends, status
from typing import List, Optional

from ...api.deps import get_bearer_token, get_pipeline
from ...core.store import ResourceType
from ...schemas.auth import UserCreate, UserUpdate, UserResponse
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("", response_model=List[UserResponse])
def list_users(
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """List all users (admin only)."""
    return pipeline.execute(token, Action.READ_MANY, ResourceType.USER)

@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    return pipeline.execute(token, Action.READ_ONE, ResourceType.USER, user_id)

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Create an account with any role, including admin (admin only)."""
    return pipeline.execute(
        token, Action.CREATE, ResourceType.USER, payload=user_data.model_dump()
    )

@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Update an account; only admins may change roles."""
    return pipeline.execute(
        token, Action.UPDATE_FIELDS, ResourceType.USER, user_id,
        payload=user_data.model_dump(exclude_unset=True)
    )

@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Delete an account (admin only); its outstanding tokens stop working."""
    pipeline.execute(token, Action.DELETE, ResourceType.USER, user_id)
    return {"message": "User deleted successfully"}
