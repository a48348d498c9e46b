"""
Appointment status workflow.

Status changes are gated by role only: the graph between statuses is
unrestricted, so a doctor may move a cancelled appointment back to
``completed``. Leaving a terminal status is permitted and logged.
"""
from dataclasses import dataclass
from typing import Dict, Union
import logging

from ..core.exceptions import TransitionForbidden
from ..core.security import UserRole
from ..models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS = AppointmentStatus.SCHEDULED
TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


@dataclass(frozen=True)
class StatusChange:
    status: AppointmentStatus
    completed: bool

    def as_fields(self) -> Dict[str, object]:
        return {"status": self.status, "completed": self.completed}


def status_fields(status: Union[AppointmentStatus, str]) -> Dict[str, object]:
    """Fields to write for ``status``; ``completed`` always follows it."""
    status = AppointmentStatus(status)
    return StatusChange(status, status == AppointmentStatus.COMPLETED).as_fields()


def initial_fields() -> Dict[str, object]:
    return status_fields(INITIAL_STATUS)


def transition(
    current: Union[AppointmentStatus, str],
    requested: Union[AppointmentStatus, str],
    role: Union[UserRole, str],
    doctor_matches: bool = False,
) -> StatusChange:
    """
    Validate a status change requested by a caller with ``role``.

    Patients may only cancel. Doctors may set any status on appointments
    booked under their name (``doctor_matches``). Admins may set any status.
    Raises TransitionForbidden otherwise.
    """
    current = AppointmentStatus(current)
    requested = AppointmentStatus(requested)
    role = UserRole(role)

    if role == UserRole.PATIENT:
        if requested != AppointmentStatus.CANCELLED:
            raise TransitionForbidden(
                "Patients can only cancel appointments",
                current=current.value, requested=requested.value
            )
    elif role == UserRole.DOCTOR:
        if not doctor_matches:
            raise TransitionForbidden(
                "You can only update appointments for your own patients",
                current=current.value, requested=requested.value
            )
    elif role == UserRole.ADMIN:
        pass
    else:
        raise ValueError(f"Unhandled role: {role}")

    if current in TERMINAL_STATUSES and requested != current:
        logger.warning(
            "Appointment leaving terminal status",
            extra={"from_status": current.value, "to_status": requested.value, "role": role.value}
        )

    return StatusChange(requested, requested == AppointmentStatus.COMPLETED)
