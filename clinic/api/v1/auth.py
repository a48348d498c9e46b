from fastapi import APIRouter, Depends, status
from typing import Optional

from ...core.security import Principal, Token, verify_credential
from ...core.store import ResourceType
from ...api.deps import get_bearer_token, get_current_principal, get_pipeline, rate_limit_check
from ...models.user import User
from ...schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse, TokenStatus
)
from ...services.pipeline import RequestPipeline
from ...services.policy import Action

router = APIRouter(prefix="/auth", tags=["Authentication"])

def _token_response(user: User, token: Token) -> TokenResponse:
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user)
    )

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    pipeline: RequestPipeline = Depends(get_pipeline),
    _: None = Depends(rate_limit_check)
):
    """Register a patient or doctor account."""
    user, token = pipeline.auth_service.register_user(user_data)
    return _token_response(user, token)

@router.post("/login", response_model=TokenResponse)
def login(
    login_data: UserLogin,
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Authenticate user and return an access token."""
    user, token = pipeline.auth_service.authenticate_user(login_data)
    return _token_response(user, token)

@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    principal: Principal = Depends(get_current_principal),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Get current user information."""
    return pipeline.perform(principal, Action.READ_ONE, ResourceType.USER, principal.id)

@router.post("/verify-token", response_model=TokenStatus)
def verify_token_endpoint(
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
):
    """Verify if token is valid."""
    claims = verify_credential(token, pipeline.secret_key, pipeline.clock())
    principal = pipeline.auth_service.resolve_principal(claims.subject_id)
    return TokenStatus(
        valid=True,
        user_id=principal.id,
        role=principal.role,
        issued_at=claims.iat,
        expires=claims.exp
    )
