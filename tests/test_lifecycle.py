import pytest

from apps.appointment import lifecycle
from core.exceptions import ConflictError


@pytest.mark.parametrize(
    "current,new",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("pending", "completed"),
        ("confirmed", "completed"),
        ("confirmed", "cancelled"),
    ],
)
def test_allowed_transitions(current, new):
    assert lifecycle.can_transition(current, new)
    lifecycle.ensure_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [
        ("cancelled", "pending"),
        ("cancelled", "confirmed"),
        ("completed", "pending"),
        ("completed", "cancelled"),
        ("confirmed", "pending"),
    ],
)
def test_rejected_transitions(current, new):
    assert not lifecycle.can_transition(current, new)
    with pytest.raises(ConflictError):
        lifecycle.ensure_transition(current, new)


def test_same_status_is_a_no_op():
    lifecycle.ensure_transition("completed", "completed")


def test_terminal_statuses():
    assert lifecycle.is_terminal("cancelled")
    assert lifecycle.is_terminal("completed")
    assert not lifecycle.is_terminal("pending")


def test_cancel_guards():
    with pytest.raises(ConflictError, match="already cancelled"):
        lifecycle.ensure_cancellable("cancelled")
    with pytest.raises(ConflictError, match="completed"):
        lifecycle.ensure_cancellable("completed")
    lifecycle.ensure_cancellable("confirmed")


def test_reschedule_guards():
    with pytest.raises(ConflictError):
        lifecycle.ensure_reschedulable("cancelled")
    with pytest.raises(ConflictError):
        lifecycle.ensure_reschedulable("completed")
    lifecycle.ensure_reschedulable("pending")


def test_only_pending_can_be_confirmed():
    lifecycle.ensure_confirmable("pending")
    with pytest.raises(ConflictError):
        lifecycle.ensure_confirmable("confirmed")


def test_prescriptions_blocked_on_cancelled():
    with pytest.raises(ConflictError, match="cancelled"):
        lifecycle.ensure_prescribable("cancelled")
    lifecycle.ensure_prescribable("pending")
