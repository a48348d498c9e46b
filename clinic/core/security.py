from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel, ValidationError
from enum import Enum

from .config import settings
from .exceptions import CredentialExpired, CredentialMalformed, CredentialMissing

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT Security; a missing header is reported by the verifier, not by FastAPI
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

@dataclass(frozen=True)
class Principal:
    """Resolved identity of the caller for a single request."""
    id: int
    name: str
    role: UserRole

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class CredentialClaims(BaseModel):
    sub: str
    iat: int
    exp: int

    @property
    def subject_id(self) -> str:
        return self.sub

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# JWT utilities
def create_access_token(
    subject_id,
    now: Optional[datetime] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed access token carrying subject, issue and expiry times."""
    issued_at = now or utcnow()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(subject_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

def create_token(subject_id) -> Token:
    """Issue a bearer token for a freshly authenticated account."""
    return Token(
        access_token=create_access_token(subject_id),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )

def verify_credential(
    token: Optional[str],
    secret_key: str,
    now: datetime
) -> CredentialClaims:
    """
    Verify a bearer token against ``secret_key`` at time ``now``.

    Only the signature is checked by python-jose; issue and expiry times are
    compared against ``now`` here so the result depends on the inputs alone.
    """
    if not token:
        raise CredentialMissing()

    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[settings.ALGORITHM],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
            }
        )
        claims = CredentialClaims(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise CredentialMalformed(reason=type(exc).__name__) from exc

    timestamp = now.timestamp()
    if timestamp >= claims.exp:
        raise CredentialExpired(subject_id=claims.sub, expired_at=claims.exp)
    if timestamp < claims.iat:
        # Issued in the future: the token was not minted by this clock
        raise CredentialMalformed(subject_id=claims.sub, issued_at=claims.iat)

    return claims
