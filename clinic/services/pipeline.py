"""
Request pipeline shared by every protected route.

Each operation runs verify -> resolve -> authorize -> (status transition) ->
persist, in that order, and nothing reaches the store before the earlier
steps pass. Failures are raised as ``ClinicError`` subclasses; the HTTP layer
renders them. Principals and decisions are recomputed on every call.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import logging

from ..core.exceptions import (
    AuthorizationDenied, CredentialMissing, IncorrectPassword, ResourceNotFound,
    TransitionForbidden,
)
from ..core.security import (
    Principal, UserRole, get_password_hash, utcnow, verify_credential, verify_password
)
from ..core.store import DocumentStore, ResourceType
from ..models.appointment import AppointmentStatus
from ..models.doctor import DoctorStatus
from . import appointment_workflow
from .auth_service import AuthService
from .policy import DENY_TRANSITION, Action, AllowWithFilter, Deny, authorize, doctor_name_matches

logger = logging.getLogger(__name__)

# Default ordering for list endpoints: (field, descending)
DEFAULT_SORT: Dict[ResourceType, Sequence[Tuple[str, bool]]] = {
    ResourceType.APPOINTMENT: (("created_at", True), ("id", True)),
    ResourceType.PATIENT: (("name", False),),
    ResourceType.DOCTOR: (("name", False),),
    ResourceType.LAB_RECORD: (("date", False), ("id", False)),
    ResourceType.USER: (("id", False),),
}

PUBLIC_READABLE = frozenset({ResourceType.DOCTOR})

Payload = Optional[Mapping[str, Any]]


class RequestPipeline:
    def __init__(
        self,
        store: DocumentStore,
        secret_key: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.secret_key = secret_key
        self.clock = clock
        self.auth_service = AuthService(store, clock=clock)

    # Identity

    def authenticate(self, token: Optional[str]) -> Principal:
        """Verify the bearer credential and load the caller's account."""
        claims = verify_credential(token, self.secret_key, self.clock())
        return self.auth_service.resolve_principal(claims.subject_id)

    # Authorization

    def authorize(
        self,
        principal: Principal,
        action: Action,
        resource_type: ResourceType,
        resource: Any = None,
        **context: Any,
    ) -> Optional[Dict[str, Any]]:
        """Raise on Deny; return the query scope for filtered decisions."""
        decision = authorize(principal, action, resource_type, resource, **context)
        if isinstance(decision, Deny):
            logger.info(
                "Denied %s on %s: %s", Action(action).value,
                ResourceType(resource_type).value, decision.code,
                extra={
                    "principal_id": principal.id,
                    "role": UserRole(principal.role).value,
                    "deny_code": decision.code,
                    **decision.diagnostics,
                }
            )
            if decision.kind == DENY_TRANSITION:
                raise TransitionForbidden(decision.reason, deny_code=decision.code)
            raise AuthorizationDenied(decision.reason, deny_code=decision.code)
        if isinstance(decision, AllowWithFilter):
            return dict(decision.predicate)
        return None

    # Entry points

    def execute(
        self,
        token: Optional[str],
        action: Action,
        resource_type: ResourceType,
        resource_id: Optional[int] = None,
        payload: Payload = None,
        query: Payload = None,
    ):
        """Authenticate the caller, then perform the operation."""
        principal = self.authenticate(token)
        return self.perform(principal, action, resource_type, resource_id, payload, query)

    def perform(
        self,
        principal: Principal,
        action: Action,
        resource_type: ResourceType,
        resource_id: Optional[int] = None,
        payload: Payload = None,
        query: Payload = None,
    ):
        action = Action(action)
        resource_type = ResourceType(resource_type)

        if action == Action.READ_MANY:
            return self._read_many(principal, resource_type, query)
        if action == Action.CREATE:
            self.authorize(principal, action, resource_type)
            fields = self._prepare_create(principal, resource_type, dict(payload or {}))
            return self.store.insert(resource_type, fields)

        record = self._load(resource_type, resource_id)

        if action == Action.READ_ONE:
            self.authorize(principal, action, resource_type, record)
            return record
        if action == Action.UPDATE_STATUS:
            return self._update_status(principal, resource_type, record, payload)
        if action == Action.UPDATE_FIELDS:
            self.authorize(principal, action, resource_type, record)
            fields = self._prepare_update(principal, resource_type, record, dict(payload or {}))
            return self._save(resource_type, record.id, fields)
        if action == Action.DELETE:
            self.authorize(principal, action, resource_type, record)
            return self._delete(resource_type, record)

        raise ValueError(f"Unhandled action: {action}")

    def public_read(
        self,
        resource_type: ResourceType,
        resource_id: Optional[int] = None,
        query: Payload = None,
    ):
        """Unauthenticated reads; only the doctor directory is public."""
        resource_type = ResourceType(resource_type)
        if resource_type not in PUBLIC_READABLE:
            raise CredentialMissing()
        if resource_id is not None:
            return self._load(resource_type, resource_id)
        return self.store.find_many(
            resource_type, dict(query or {}), sort=DEFAULT_SORT[resource_type]
        )

    # Steps

    def _load(self, resource_type: ResourceType, resource_id: Optional[int]):
        if resource_id is None:
            raise ValueError(f"A record id is required for {resource_type.value}")
        record = self.store.find_one(resource_type, {"id": resource_id})
        if record is None:
            raise ResourceNotFound(
                f"{resource_type.value.replace('_', ' ').capitalize()} not found"
            )
        return record

    def _save(self, resource_type: ResourceType, record_id: int, fields: Dict[str, Any]):
        # Concurrent writers are not serialized: the last write wins
        record = self.store.update_by_id(resource_type, record_id, fields)
        if record is None:
            raise ResourceNotFound(
                f"{resource_type.value.replace('_', ' ').capitalize()} not found"
            )
        return record

    def _read_many(self, principal: Principal, resource_type: ResourceType, query: Payload) -> List:
        query = {k: v for k, v in (query or {}).items() if v is not None}
        scope = self.authorize(
            principal, Action.READ_MANY, resource_type, explicit_filter=query
        )
        return self.store.find_many(
            resource_type, query, sort=DEFAULT_SORT[resource_type], scope=scope
        )

    def _update_status(self, principal: Principal, resource_type: ResourceType, record, payload: Payload):
        if resource_type != ResourceType.APPOINTMENT:
            # No other resource has a status workflow; the policy denies it
            self.authorize(principal, Action.UPDATE_STATUS, resource_type, record)
            raise ValueError(f"No status workflow for {resource_type.value}")
        if not payload or payload.get("status") is None:
            raise ValueError("A target status is required")
        requested = AppointmentStatus(payload["status"])

        self.authorize(
            principal, Action.UPDATE_STATUS, resource_type, record,
            target_status=requested,
        )
        change = appointment_workflow.transition(
            record.status,
            requested,
            principal.role,
            doctor_matches=doctor_name_matches(record.doctor, principal.name),
        )

        logger.info(
            "Updating appointment %s from %s to %s", record.id,
            AppointmentStatus(record.status).value, change.status.value,
            extra={
                "appointment_id": record.id,
                "principal_id": principal.id,
                "role": UserRole(principal.role).value,
            }
        )
        return self._save(ResourceType.APPOINTMENT, record.id, change.as_fields())

    def _delete(self, resource_type: ResourceType, record):
        if resource_type == ResourceType.DOCTOR:
            # Doctors are deactivated, never removed from the directory
            return self._save(resource_type, record.id, {"status": DoctorStatus.INACTIVE})
        deleted = self.store.delete_by_id(resource_type, record.id)
        if deleted is None:
            raise ResourceNotFound(
                f"{resource_type.value.replace('_', ' ').capitalize()} not found"
            )
        return deleted

    # Payload shaping

    def _prepare_create(
        self, principal: Principal, resource_type: ResourceType, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        role = UserRole(principal.role)

        if resource_type == ResourceType.APPOINTMENT:
            # Only admins may book on behalf of another account
            if role != UserRole.ADMIN or fields.get("patient_id") is None:
                fields["patient_id"] = principal.id
            else:
                self._require_account(fields["patient_id"])
            fields.update(appointment_workflow.initial_fields())
        elif resource_type == ResourceType.PATIENT:
            if role == UserRole.PATIENT:
                fields["user_id"] = principal.id
            elif fields.get("user_id") is not None:
                self._require_account(fields["user_id"])
        elif resource_type == ResourceType.DOCTOR:
            if fields.get("user_id") is not None:
                self._require_account(fields["user_id"])
        elif resource_type == ResourceType.LAB_RECORD:
            if not fields.get("doctor"):
                fields["doctor"] = principal.name
            self._require_account(fields.get("patient_id"))
        elif resource_type == ResourceType.USER:
            fields = self._hash_password(fields)
            fields["email"] = fields["email"].strip().lower()
        return fields

    def _prepare_update(
        self, principal: Principal, resource_type: ResourceType, record, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        fields = {k: v for k, v in fields.items() if v is not None}
        fields.pop("id", None)
        role = UserRole(principal.role)

        if resource_type == ResourceType.APPOINTMENT:
            fields.pop("patient_id", None)
            fields.pop("completed", None)
            if "status" in fields:
                # A status inside a full edit is still a transition
                change = appointment_workflow.transition(
                    record.status,
                    fields["status"],
                    role,
                    doctor_matches=doctor_name_matches(record.doctor, principal.name),
                )
                fields.update(change.as_fields())
        elif resource_type == ResourceType.PATIENT:
            if role != UserRole.ADMIN:
                fields.pop("user_id", None)
            elif "user_id" in fields:
                self._require_account(fields["user_id"])
        elif resource_type == ResourceType.LAB_RECORD:
            fields.pop("patient_id", None)
        elif resource_type == ResourceType.USER:
            if "role" in fields and role != UserRole.ADMIN:
                raise AuthorizationDenied("Only admins can change roles", deny_code="role_change")
            current_password = fields.pop("current_password", None)
            if "password" in fields and role != UserRole.ADMIN:
                if not verify_password(current_password, record.password_hash):
                    raise IncorrectPassword(user_id=record.id)
            fields = self._hash_password(fields)
            if "email" in fields:
                fields["email"] = fields["email"].strip().lower()
        return fields

    def _require_account(self, user_id: Optional[int]):
        """Referenced accounts must exist; the database may not enforce it."""
        if user_id is None or self.store.find_one(ResourceType.USER, {"id": user_id}) is None:
            raise ResourceNotFound("Account not found", user_id=user_id)

    @staticmethod
    def _hash_password(fields: Dict[str, Any]) -> Dict[str, Any]:
        if "password" in fields:
            fields["password_hash"] = get_password_hash(fields.pop("password"))
        return fields
