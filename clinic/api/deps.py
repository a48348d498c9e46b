from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import Principal, security
from ..core.store import DocumentStore
from ..services.pipeline import RequestPipeline

def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    """Document store bound to the request's database session."""
    return DocumentStore(db)

def get_pipeline(store: DocumentStore = Depends(get_store)) -> RequestPipeline:
    """A fresh pipeline per request; nothing is cached between requests."""
    return RequestPipeline(store, settings.SECRET_KEY)

async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    """Raw bearer token from the Authorization header, if any."""
    return credentials.credentials if credentials else None

async def get_current_principal(
    token: Optional[str] = Depends(get_bearer_token),
    pipeline: RequestPipeline = Depends(get_pipeline)
) -> Principal:
    """Verify the token and resolve the caller."""
    return pipeline.authenticate(token)

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for account creation."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
