"""
Appointment status graph.

    pending   -> confirmed | cancelled | completed
    confirmed -> completed | cancelled
    cancelled, completed: terminal

Completing straight from pending is allowed. The explicit complete action
does not consult this graph at all (it succeeds from any status); every
other status change goes through it.
"""

from typing import Dict, Tuple

from core.enum import AppointmentStatus
from core.exceptions import ConflictError

PENDING = AppointmentStatus.PENDING.value
CONFIRMED = AppointmentStatus.CONFIRMED.value
CANCELLED = AppointmentStatus.CANCELLED.value
COMPLETED = AppointmentStatus.COMPLETED.value

TERMINAL_STATUSES: Tuple[str, ...] = (CANCELLED, COMPLETED)

TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    PENDING: (CONFIRMED, CANCELLED, COMPLETED),
    CONFIRMED: (COMPLETED, CANCELLED),
    CANCELLED: (),
    COMPLETED: (),
}

DEFAULT_CANCELLATION_REASON = "No reason provided"


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, ())


def ensure_transition(current: str, new: str) -> None:
    if current == new:
        return
    if not can_transition(current, new):
        raise ConflictError(f"Cannot change appointment status from {current} to {new}")


def ensure_cancellable(status: str) -> None:
    if status == CANCELLED:
        raise ConflictError("Appointment is already cancelled")
    if status == COMPLETED:
        raise ConflictError("Cannot cancel a completed appointment")


def ensure_reschedulable(status: str) -> None:
    if status == CANCELLED:
        raise ConflictError("Cannot reschedule a cancelled appointment")
    if status == COMPLETED:
        raise ConflictError("Cannot reschedule a completed appointment")


def ensure_confirmable(status: str) -> None:
    if status != PENDING:
        raise ConflictError(f"Cannot confirm an appointment that is {status}")


def ensure_prescribable(status: str) -> None:
    if status == CANCELLED:
        raise ConflictError("Cannot create prescription for cancelled appointments")
