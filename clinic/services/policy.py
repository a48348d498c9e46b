"""
Access policy for clinic resources.

``authorize`` looks up a fixed rule for every (resource, action, role) triple
and returns one of three decisions:

* ``Allow``: proceed.
* ``AllowWithFilter``: proceed, but only over records matching ``predicate``;
  the predicate is handed to the store as a query scope.
* ``Deny``: refuse, with a public ``reason`` and a ``kind`` telling the
  pipeline whether to report an authorization or a status-transition error.

An account carries exactly one role, so the table never has to arbitrate
between roles; were that to change, admin rules take precedence over doctor
rules, which take precedence over patient rules.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..core.security import Principal, UserRole
from ..core.store import ResourceType
from ..models.appointment import AppointmentStatus


class Action(str, Enum):
    READ_ONE = "read_one"
    READ_MANY = "read_many"
    CREATE = "create"
    UPDATE_FIELDS = "update_fields"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"


DENY_AUTHORIZATION = "authorization"
DENY_TRANSITION = "transition"


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class AllowWithFilter:
    predicate: Dict[str, Any]


@dataclass(frozen=True)
class Deny:
    reason: str
    code: str
    kind: str = DENY_AUTHORIZATION
    diagnostics: Dict[str, Any] = field(default_factory=dict, compare=False)


Decision = Union[Allow, AllowWithFilter, Deny]


@dataclass(frozen=True)
class AccessRequest:
    principal: Principal
    resource: Any = None
    target_status: Optional[AppointmentStatus] = None
    explicit_filter: Optional[Mapping[str, Any]] = None


Rule = Callable[[AccessRequest], Decision]

ALLOW = Allow()


def doctor_name_matches(appointment_doctor: Optional[str], caller_name: Optional[str]) -> bool:
    """Case-insensitive, whitespace-trimmed comparison of doctor display names."""
    expected = (appointment_doctor or "").strip().lower()
    actual = (caller_name or "").strip().lower()
    return bool(expected) and expected == actual


# Rule builders

def allow(request: AccessRequest) -> Decision:
    return ALLOW


def deny(reason: str, code: str = "forbidden_role") -> Rule:
    def rule(request: AccessRequest) -> Decision:
        return Deny(reason, code)
    return rule


def owner_only(owner_field: str, reason: str = "Access denied") -> Rule:
    """Allow only when the target's ``owner_field`` is the caller's id."""
    def rule(request: AccessRequest) -> Decision:
        owner = getattr(request.resource, owner_field, None)
        if owner is not None and owner == request.principal.id:
            return ALLOW
        return Deny(reason, "not_owner")
    return rule


def scoped_to_self(owner_field: str) -> Rule:
    def rule(request: AccessRequest) -> Decision:
        return AllowWithFilter({owner_field: request.principal.id})
    return rule


def scoped_to_doctor_name(request: AccessRequest) -> Decision:
    return AllowWithFilter({"doctor": request.principal.name})


NOT_APPLICABLE = deny("Action not supported for this resource", "unsupported_action")
ADMIN_ONLY = {
    UserRole.PATIENT: deny("Admin access required"),
    UserRole.DOCTOR: deny("Admin access required"),
    UserRole.ADMIN: allow,
}
EVERYONE = {role: allow for role in UserRole}
NOBODY = {role: NOT_APPLICABLE for role in UserRole}


# Appointment-specific rules

def doctor_lists_appointments(request: AccessRequest) -> Decision:
    # An explicit doctor/patient query replaces the default own-name scope
    if request.explicit_filter:
        return ALLOW
    return scoped_to_doctor_name(request)


def patient_cancels_own_appointment(request: AccessRequest) -> Decision:
    if request.target_status != AppointmentStatus.CANCELLED:
        return Deny(
            "Patients can only cancel appointments",
            "patient_cancel_only",
            kind=DENY_TRANSITION,
        )
    return owner_only("patient_id")(request)


def doctor_updates_own_appointment(request: AccessRequest) -> Decision:
    appointment_doctor = getattr(request.resource, "doctor", None)
    if doctor_name_matches(appointment_doctor, request.principal.name):
        return ALLOW
    return Deny(
        "You can only update appointments for your own patients",
        "doctor_mismatch",
        kind=DENY_TRANSITION,
        diagnostics={
            "appointment_id": getattr(request.resource, "id", None),
            "appointment_doctor": appointment_doctor,
            "caller_name": request.principal.name,
        },
    )


RULES: Dict[tuple, Dict[UserRole, Rule]] = {
    # Appointments
    (ResourceType.APPOINTMENT, Action.CREATE): {
        UserRole.PATIENT: allow,
        UserRole.DOCTOR: deny("Doctors cannot book appointments"),
        UserRole.ADMIN: allow,
    },
    (ResourceType.APPOINTMENT, Action.READ_MANY): {
        UserRole.PATIENT: scoped_to_self("patient_id"),
        UserRole.DOCTOR: doctor_lists_appointments,
        UserRole.ADMIN: allow,
    },
    (ResourceType.APPOINTMENT, Action.READ_ONE): {
        UserRole.PATIENT: owner_only("patient_id"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.APPOINTMENT, Action.UPDATE_STATUS): {
        UserRole.PATIENT: patient_cancels_own_appointment,
        UserRole.DOCTOR: doctor_updates_own_appointment,
        UserRole.ADMIN: allow,
    },
    (ResourceType.APPOINTMENT, Action.UPDATE_FIELDS): {
        UserRole.PATIENT: deny("Only doctors and admins can edit appointments"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.APPOINTMENT, Action.DELETE): ADMIN_ONLY,

    # Patient profiles
    (ResourceType.PATIENT, Action.CREATE): EVERYONE,
    (ResourceType.PATIENT, Action.READ_MANY): {
        UserRole.PATIENT: deny("Access denied"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.PATIENT, Action.READ_ONE): {
        UserRole.PATIENT: owner_only("user_id"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.PATIENT, Action.UPDATE_FIELDS): {
        UserRole.PATIENT: owner_only("user_id"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.PATIENT, Action.UPDATE_STATUS): NOBODY,
    (ResourceType.PATIENT, Action.DELETE): {
        UserRole.PATIENT: deny("Only admins can delete patients"),
        UserRole.DOCTOR: deny("Only admins can delete patients"),
        UserRole.ADMIN: allow,
    },

    # Doctor directory
    (ResourceType.DOCTOR, Action.CREATE): EVERYONE,
    (ResourceType.DOCTOR, Action.READ_MANY): EVERYONE,
    (ResourceType.DOCTOR, Action.READ_ONE): EVERYONE,
    (ResourceType.DOCTOR, Action.UPDATE_FIELDS): ADMIN_ONLY,
    (ResourceType.DOCTOR, Action.UPDATE_STATUS): NOBODY,
    (ResourceType.DOCTOR, Action.DELETE): ADMIN_ONLY,

    # Lab records
    (ResourceType.LAB_RECORD, Action.CREATE): {
        UserRole.PATIENT: deny("Only doctors and admins can create lab records"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.LAB_RECORD, Action.READ_MANY): {
        UserRole.PATIENT: scoped_to_self("patient_id"),
        UserRole.DOCTOR: scoped_to_doctor_name,
        UserRole.ADMIN: allow,
    },
    (ResourceType.LAB_RECORD, Action.READ_ONE): {
        UserRole.PATIENT: owner_only("patient_id"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.LAB_RECORD, Action.UPDATE_FIELDS): {
        UserRole.PATIENT: deny("Only doctors and admins can edit lab records"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },
    (ResourceType.LAB_RECORD, Action.UPDATE_STATUS): NOBODY,
    (ResourceType.LAB_RECORD, Action.DELETE): {
        UserRole.PATIENT: owner_only("patient_id"),
        UserRole.DOCTOR: allow,
        UserRole.ADMIN: allow,
    },

    # Accounts
    (ResourceType.USER, Action.CREATE): ADMIN_ONLY,
    (ResourceType.USER, Action.READ_MANY): ADMIN_ONLY,
    (ResourceType.USER, Action.READ_ONE): {
        UserRole.PATIENT: owner_only("id"),
        UserRole.DOCTOR: owner_only("id"),
        UserRole.ADMIN: allow,
    },
    (ResourceType.USER, Action.UPDATE_FIELDS): {
        UserRole.PATIENT: owner_only("id"),
        UserRole.DOCTOR: owner_only("id"),
        UserRole.ADMIN: allow,
    },
    (ResourceType.USER, Action.UPDATE_STATUS): NOBODY,
    (ResourceType.USER, Action.DELETE): ADMIN_ONLY,
}


def _check_rule_table():
    """Fail at import if any (resource, action, role) triple lacks a rule."""
    missing = [
        (resource.value, action.value, role.value)
        for resource in ResourceType
        for action in Action
        for role in UserRole
        if role not in RULES.get((resource, action), {})
    ]
    if missing:
        raise RuntimeError(f"Access rules missing for: {missing}")

_check_rule_table()


def authorize(
    principal: Principal,
    action: Action,
    resource_type: ResourceType,
    resource: Any = None,
    *,
    target_status: Optional[AppointmentStatus] = None,
    explicit_filter: Optional[Mapping[str, Any]] = None,
) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on the resource."""
    role = UserRole(principal.role)
    rule = RULES[(ResourceType(resource_type), Action(action))][role]
    if target_status is not None:
        target_status = AppointmentStatus(target_status)
    return rule(AccessRequest(principal, resource, target_status, explicit_filter))
