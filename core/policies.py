"""
Access control rules shared by the booking, review and prescription services.

Every check either returns quietly or raises a typed error from
core.exceptions. Checks never mutate anything, so services run them before
touching a row. Ownership is always a plain comparison of primary keys:
appointments point at a Doctor profile, so doctor accounts are resolved to
their profile first.
"""

import logging
from typing import Optional

from apps.account.models import Doctor, User
from core.enum import AccountStatus, UserType
from core.exceptions import (
    AccountNotApproved,
    AuthorizationError,
    DoctorProfileNotFound,
)

logger = logging.getLogger(__name__)


class AccessPolicy:
    """Per-operation authorization keyed by role and ownership"""

    @staticmethod
    def is_admin(user: User) -> bool:
        return user.role == UserType.ADMIN.value

    @staticmethod
    def is_doctor(user: User) -> bool:
        return user.role == UserType.DOCTOR.value

    @staticmethod
    def is_patient(user: User) -> bool:
        return user.role == UserType.PATIENT.value

    @staticmethod
    def ensure_approved(user: User) -> None:
        """Status gate, evaluated before any role check"""
        if user.status != AccountStatus.APPROVED.value:
            raise AccountNotApproved()

    @staticmethod
    def find_doctor_profile(user: User) -> Optional[Doctor]:
        return Doctor.objects.filter(user_id=user.id).first()

    @classmethod
    def resolve_doctor_profile(cls, user: User) -> Doctor:
        doctor = cls.find_doctor_profile(user)
        if doctor is None:
            raise DoctorProfileNotFound()
        return doctor

    # Appointments

    @classmethod
    def ensure_can_book(cls, user: User) -> None:
        if not cls.is_patient(user):
            raise AuthorizationError("Only patients can book appointments.")

    @classmethod
    def ensure_can_view_appointment(cls, user: User, appointment) -> None:
        if cls.is_admin(user):
            return
        if cls.is_doctor(user):
            doctor = cls.resolve_doctor_profile(user)
            if doctor.id == appointment.doctor_id:
                return
        elif cls.is_patient(user) and appointment.patient_id == user.id:
            return
        raise AuthorizationError(
            "Access denied. You can only view your own appointments."
        )

    @classmethod
    def ensure_can_modify_booking(cls, user: User, appointment, action: str) -> None:
        """Cancel and reschedule: owning patient or owning doctor (or admin)"""
        if cls.is_admin(user):
            return
        if cls.is_patient(user) and appointment.patient_id == user.id:
            return
        if cls.is_doctor(user):
            doctor = cls.resolve_doctor_profile(user)
            if doctor.id == appointment.doctor_id:
                return
        logger.warning(
            f"Denied {action} on appointment {appointment.id} for user {user.id}"
        )
        raise AuthorizationError(f"You can only {action} your own appointments")

    @classmethod
    def ensure_can_complete(cls, user: User, appointment) -> None:
        if cls.is_admin(user):
            return
        if cls.is_doctor(user):
            doctor = cls.resolve_doctor_profile(user)
            if doctor.id != appointment.doctor_id:
                raise AuthorizationError(
                    "You can only mark your own appointments as completed"
                )
            return
        raise AuthorizationError(
            "Access denied. Only doctors and admins can mark appointments as completed."
        )

    @classmethod
    def ensure_can_confirm(cls, user: User, appointment) -> None:
        if cls.is_admin(user):
            return
        if cls.is_doctor(user):
            doctor = cls.resolve_doctor_profile(user)
            if doctor.id == appointment.doctor_id:
                return
            raise AuthorizationError("You can only confirm your own appointments")
        raise AuthorizationError(
            "Access denied. Only doctors and admins can confirm appointments."
        )

    @classmethod
    def ensure_owning_doctor(cls, user: User, appointment, message: str) -> Doctor:
        """Consultation notes and prescriptions are reserved to the treating doctor"""
        if not cls.is_doctor(user):
            raise AuthorizationError("Access denied. Doctors only.")
        doctor = cls.resolve_doctor_profile(user)
        if doctor.id != appointment.doctor_id:
            raise AuthorizationError(message)
        return doctor

    # Reviews

    @classmethod
    def ensure_can_review(cls, user: User, appointment) -> None:
        if not cls.is_patient(user) or appointment.patient_id != user.id:
            raise AuthorizationError("You can only review your own appointments")

    @classmethod
    def ensure_review_author(cls, user: User, review, action: str) -> None:
        if review.patient_id != user.id:
            raise AuthorizationError(f"You can only {action} your own reviews")

    # Prescriptions

    @classmethod
    def ensure_can_view_prescription(cls, user: User, prescription) -> None:
        if cls.is_admin(user):
            return
        if cls.is_patient(user) and prescription.patient_id == user.id:
            return
        if cls.is_doctor(user) and prescription.doctor_id == user.id:
            return
        raise AuthorizationError("Access denied")

    @classmethod
    def ensure_prescription_author(cls, user: User, prescription) -> None:
        if not cls.is_doctor(user) or prescription.doctor_id != user.id:
            raise AuthorizationError("You can only update your own prescriptions")

    # Accounts

    @classmethod
    def ensure_can_delete_user(cls, actor: User, target: User) -> None:
        if not cls.is_admin(actor):
            raise AuthorizationError("Access denied. Admin only.")
        if target.role == UserType.ADMIN.value:
            raise AuthorizationError("Cannot delete admin users")
