"""
Structured errors raised by the authorization subsystem.

Every failure is a ``ClinicError`` carrying the HTTP status it maps to, a
public ``detail`` safe to show to the caller, a machine ``code`` and optional
diagnostics that are only ever written to the log.
"""
from typing import Any, Dict, Optional


class ClinicError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    detail: str = "An unexpected error occurred"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, **diagnostics: Any):
        if detail is not None:
            self.detail = detail
        self.diagnostics = diagnostics
        super().__init__(self.detail)


# Authentication failures all share one public message so that callers
# cannot tell a forged token from a deleted account.
class AuthenticationFailure(ClinicError):
    status_code = 401
    code = "not_authenticated"
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, **diagnostics: Any):
        super().__init__("Could not validate credentials", **diagnostics)


class CredentialMissing(AuthenticationFailure):
    code = "credential_missing"


class CredentialMalformed(AuthenticationFailure):
    code = "credential_malformed"


class CredentialExpired(AuthenticationFailure):
    code = "credential_expired"


class PrincipalNotFound(AuthenticationFailure):
    code = "principal_not_found"


class AuthorizationDenied(ClinicError):
    status_code = 403
    code = "authorization_denied"
    detail = "Access denied"


class TransitionForbidden(ClinicError):
    status_code = 403
    code = "transition_forbidden"
    detail = "Status change not permitted"


class ResourceNotFound(ClinicError):
    status_code = 404
    code = "resource_not_found"
    detail = "Resource not found"


class DuplicateRecord(ClinicError):
    status_code = 400
    code = "duplicate_record"
    detail = "Record already exists"


class ConstraintViolation(ClinicError):
    status_code = 400
    code = "constraint_violation"
    detail = "Record conflicts with existing data"


class InvalidLogin(ClinicError):
    status_code = 401
    code = "invalid_login"
    detail = "Invalid email or password"


class IncorrectPassword(ClinicError):
    status_code = 400
    code = "incorrect_password"
    detail = "Current password is incorrect"
