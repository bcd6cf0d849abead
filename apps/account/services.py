import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import ProtectedError
from django.utils import timezone

from apps.appointment.utils import parse_appointment_date
from apps.notification.dispatcher import NotificationDispatcher
from core.enum import AccountStatus, Gender, RegistrationStatus, UserType
from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.policies import AccessPolicy
from core.storage import FileStorageService
from core.validators import clean_text

from .credentials import CredentialService
from .models import Doctor, DoctorRegistrationRequest, User
from .selectors import DoctorSelector, RegistrationRequestSelector, UserSelector

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


def validate_password(password: str) -> Tuple[bool, List[str]]:
    """
    Validate password strength
    Requirements: minimum 8 characters, 1 uppercase, 1 digit, 1 special character
    """
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")

    if not re.search(r'[!@#$%^&*(),.?":{}|<>]', password):
        errors.append("Password must contain at least one special character")

    return len(errors) == 0, errors


def _clean_field(model, field: str, value, default: str = "") -> str:
    label = field.replace("_", " ").capitalize()
    return clean_text(value, label, model._meta.get_field(field).max_length, default)


def _clean_new_account(name: str, email: str, password: str) -> Tuple[str, str]:
    name = _clean_field(User, "name", name)
    email = _clean_field(User, "email", email).lower()
    if not isinstance(password, str):
        raise ValidationError("Password must be a string")

    if not all([name, email, password]):
        raise ValidationError("Name, email, and password are required")

    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError("Invalid email format")

    is_valid_password, password_errors = validate_password(password)
    if not is_valid_password:
        raise ValidationError("; ".join(password_errors))

    if UserSelector.check_email_exists(email):
        raise ConflictError("User already exists")

    return name, email


def _clean_non_negative_int(value, field: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")
    if number < 0:
        raise ValidationError(f"Invalid {field}")
    return number


def _clean_fee(value) -> Decimal:
    try:
        fee = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid consultation fee")
    if fee < 0:
        raise ValidationError("Invalid consultation fee")
    return fee


class AuthServices:
    """Registration, login, token refresh and doctor applications"""

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or NotificationDispatcher()

    @staticmethod
    def register_user(user_data: Dict[str, Any]) -> User:
        """
        Register a patient, or submit a doctor application. Doctors start as
        pending and cannot use the API until an admin approves them.
        """
        role = user_data.get("role") or UserType.PATIENT.value
        if role == UserType.ADMIN.value:
            raise AuthorizationError(
                "Admin registration is not allowed through this endpoint"
            )
        if role not in (UserType.PATIENT.value, UserType.DOCTOR.value):
            raise ValidationError("Invalid role")

        password = user_data.get("password") or ""
        name, email = _clean_new_account(user_data.get("name"), user_data.get("email"), password)

        application = {}
        if role == UserType.DOCTOR.value:
            specialization = _clean_field(
                DoctorRegistrationRequest, "specialization", user_data.get("specialization")
            )
            qualification = _clean_field(
                DoctorRegistrationRequest, "qualification", user_data.get("qualification")
            )
            if not specialization or not qualification:
                raise ValidationError(
                    "Specialization and qualification are required for doctor registration"
                )
            application = {
                "specialization": specialization,
                "qualification": qualification,
                "experience": _clean_non_negative_int(
                    user_data.get("experience") or 0, "experience"
                ),
                "bio": _clean_field(DoctorRegistrationRequest, "bio", user_data.get("bio")),
            }

        with transaction.atomic():
            user = User.objects.create(
                name=name,
                email=email,
                phone=_clean_field(User, "phone", user_data.get("phone")),
                password=CredentialService.hash_password(password),
                role=role,
                status=(
                    AccountStatus.PENDING.value
                    if role == UserType.DOCTOR.value
                    else AccountStatus.APPROVED.value
                ),
            )

            if application:
                DoctorRegistrationRequest.objects.create(user=user, **application)

        logger.info(f"User registered: {email} as {role}")
        return user

    @staticmethod
    def create_admin(admin_data: Dict[str, Any]) -> User:
        password = admin_data.get("password") or ""
        name, email = _clean_new_account(admin_data.get("name"), admin_data.get("email"), password)

        user = User.objects.create(
            name=name,
            email=email,
            password=CredentialService.hash_password(password),
            role=UserType.ADMIN.value,
            status=AccountStatus.APPROVED.value,
            is_staff=True,
        )
        logger.info(f"Admin created: {email}")
        return user

    @staticmethod
    def authenticate_user(email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue an access token plus a fresh refresh token
        """
        email = _clean_field(User, "email", email).lower()
        if not email or not password or not isinstance(password, str):
            raise ValidationError("Email and password are required")

        user = UserSelector.get_user_by_email(email)
        if not user or not CredentialService.verify_password(user, password):
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid credentials")

        refresh_token, expiry = CredentialService.issue_refresh_token(user)
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        logger.info(f"User authenticated successfully: {email}")
        return {
            "access_token": CredentialService.issue_access_token(user),
            "refresh_token": refresh_token,
            "refresh_token_expiry": expiry,
            "user": user,
        }

    @staticmethod
    def refresh_access_token(refresh_token: str) -> Dict[str, Any]:
        if not refresh_token:
            raise AuthenticationError("Refresh token not provided")

        user = CredentialService.get_user_by_refresh_token(refresh_token)
        if not user:
            raise AuthenticationError("Invalid or expired refresh token")

        return {
            "access_token": CredentialService.issue_access_token(user),
            "user": user,
        }

    @staticmethod
    def logout(refresh_token: Optional[str]) -> None:
        if refresh_token:
            CredentialService.revoke_refresh_token(refresh_token)

    def approve_doctor(self, admin: User, request_id: int) -> Doctor:
        with transaction.atomic():
            application = RegistrationRequestSelector.get_request_for_update(request_id)
            if not application:
                raise NotFoundError("Registration request not found")
            if application.status != RegistrationStatus.PENDING.value:
                raise ConflictError("Request has already been processed")

            user = application.user
            user.status = AccountStatus.APPROVED.value
            user.save(update_fields=["status", "updated_at"])

            doctor, _ = Doctor.objects.update_or_create(
                user=user,
                defaults={
                    "specialization": application.specialization,
                    "qualification": application.qualification,
                    "experience": application.experience,
                    "bio": application.bio,
                    "approved_by": admin,
                    "approved_at": timezone.now(),
                },
            )

            application.status = RegistrationStatus.APPROVED.value
            application.reviewed_by = admin
            application.reviewed_at = timezone.now()
            application.save(
                update_fields=["status", "reviewed_by", "reviewed_at", "updated_at"]
            )

            self.dispatcher.doctor_application_reviewed(user, approved=True)

        logger.info(f"Doctor approved: user {user.id}, profile {doctor.id}, by admin {admin.id}")
        return doctor

    def reject_doctor(self, admin: User, request_id: int, rejection_reason: str = "") -> DoctorRegistrationRequest:
        with transaction.atomic():
            application = RegistrationRequestSelector.get_request_for_update(request_id)
            if not application:
                raise NotFoundError("Registration request not found")
            if application.status != RegistrationStatus.PENDING.value:
                raise ConflictError("Request has already been processed")

            user = application.user
            user.status = AccountStatus.REJECTED.value
            user.save(update_fields=["status", "updated_at"])

            application.status = RegistrationStatus.REJECTED.value
            application.reviewed_by = admin
            application.reviewed_at = timezone.now()
            application.rejection_reason = (
                _clean_field(DoctorRegistrationRequest, "rejection_reason", rejection_reason)
                or "Application rejected by admin"
            )
            application.save(
                update_fields=[
                    "status",
                    "reviewed_by",
                    "reviewed_at",
                    "rejection_reason",
                    "updated_at",
                ]
            )

            self.dispatcher.doctor_application_reviewed(
                user, approved=False, reason=application.rejection_reason
            )

        logger.info(f"Doctor application rejected: request {application.id}, by admin {admin.id}")
        return application


class UserServices:
    """Admin user management and self-service profile updates"""

    PROFILE_FIELDS = ["name", "phone", "address", "date_of_birth", "gender"]
    ADMIN_FIELDS = PROFILE_FIELDS + ["email", "role", "status"]

    @staticmethod
    def get_user(user_id: int) -> User:
        user = UserSelector.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @classmethod
    def _apply_fields(cls, user: User, update_data: Dict[str, Any], allowed: List[str]) -> List[str]:
        updated_fields = []

        for field in allowed:
            value = update_data.get(field)
            # Empty values never clear a field, same as the profile form
            if value in (None, ""):
                continue

            if field == "email":
                value = _clean_field(User, "email", value).lower()
                if not re.match(EMAIL_PATTERN, value):
                    raise ValidationError("Invalid email format")
                if UserSelector.check_email_exists(value, exclude_id=user.id):
                    raise ConflictError("User already exists")
            elif field == "date_of_birth":
                value = parse_appointment_date(value)
                if value is None:
                    raise ValidationError("Invalid date of birth")
            elif field == "gender" and not Gender.has_value(value):
                raise ValidationError("Invalid gender")
            elif field == "role" and not UserType.has_value(value):
                raise ValidationError("Invalid role")
            elif field == "status" and not AccountStatus.has_value(value):
                raise ValidationError("Invalid status")
            else:
                value = _clean_field(User, field, value)

            setattr(user, field, value)
            updated_fields.append(field)

        if updated_fields:
            user.save(update_fields=updated_fields + ["updated_at"])
        return updated_fields

    @classmethod
    def update_user(cls, user_id: int, update_data: Dict[str, Any]) -> User:
        with transaction.atomic():
            user = cls.get_user(user_id)
            updated_fields = cls._apply_fields(user, update_data, cls.ADMIN_FIELDS)

        logger.info(f"User updated by admin: {user.email}, fields: {updated_fields}")
        return user

    @classmethod
    def update_user_status(cls, user_id: int, new_status: str) -> User:
        if not AccountStatus.has_value(new_status):
            raise ValidationError("Invalid status")

        user = cls.get_user(user_id)
        old_status = user.status
        user.status = new_status
        user.save(update_fields=["status", "updated_at"])

        logger.info(f"User status updated: {user.email}, {old_status} -> {new_status}")
        return user

    @classmethod
    def delete_user(cls, actor: User, user_id: int) -> None:
        user = cls.get_user(user_id)
        AccessPolicy.ensure_can_delete_user(actor, user)

        email = user.email
        # The doctor profile goes with the account; appointments, reviews and
        # prescriptions stay, detached from the deleted account
        try:
            with transaction.atomic():
                user.delete()
        except ProtectedError:
            raise ConflictError(
                "Cannot delete a doctor with existing appointments. Deactivate the profile instead."
            )
        logger.info(f"User deleted: {email}, by admin {actor.id}")

    @classmethod
    def update_profile(cls, user: User, update_data: Dict[str, Any]) -> User:
        updated_fields = cls._apply_fields(user, update_data, cls.PROFILE_FIELDS)
        logger.info(f"User profile updated: {user.email}, fields: {updated_fields}")
        return user

    @staticmethod
    def upload_profile_picture(user: User, image_file) -> str:
        if not image_file:
            raise ValidationError("No file uploaded")

        new_url = FileStorageService.upload(image_file, folder="profiles")
        FileStorageService.delete(user.profile_picture)

        user.profile_picture = new_url
        user.save(update_fields=["profile_picture", "updated_at"])
        logger.info(f"Profile picture updated: {user.email}")
        return new_url


class DoctorServices:
    """Admin-side doctor profile management"""

    WRITABLE_FIELDS = [
        "specialization",
        "qualification",
        "experience",
        "availability",
        "bio",
        "image",
        "consultation_fee",
        "is_active",
    ]

    @classmethod
    def _clean(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        # rating and total_reviews are derived and never taken from a payload
        cleaned = {}
        for field in cls.WRITABLE_FIELDS:
            if field not in data or data[field] is None:
                continue
            value = data[field]

            if field == "experience":
                value = _clean_non_negative_int(value, "experience")
            elif field == "consultation_fee":
                value = _clean_fee(value)
            elif field == "availability" and not isinstance(value, dict):
                raise ValidationError("Availability must be an object of day to slots")
            elif field == "is_active":
                value = value in (True, "true", "True", "1", 1)
            else:
                value = _clean_field(Doctor, field, value)

            cleaned[field] = value
        return cleaned

    @classmethod
    def create_doctor(cls, doctor_data: Dict[str, Any]) -> Doctor:
        user_id = doctor_data.get("user_id")
        if not user_id or not doctor_data.get("specialization"):
            raise ValidationError("User ID and specialization are required")

        user = UserSelector.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.role != UserType.DOCTOR.value:
            raise ValidationError("User is not a doctor")
        if DoctorSelector.get_doctor_by_user(user.id):
            raise ConflictError("Doctor profile already exists for this user")

        doctor = Doctor.objects.create(user=user, **cls._clean(doctor_data))
        logger.info(f"Doctor profile created: ID {doctor.id} for user {user.id}")
        return doctor

    @classmethod
    def update_doctor(cls, doctor_id: int, update_data: Dict[str, Any]) -> Doctor:
        doctor = DoctorSelector.get_doctor_by_id(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")

        cleaned = cls._clean(update_data)
        for field, value in cleaned.items():
            setattr(doctor, field, value)
        if cleaned:
            doctor.save(update_fields=list(cleaned) + ["updated_at"])

        logger.info(f"Doctor profile updated: ID {doctor.id}, fields: {list(cleaned)}")
        return doctor

    @staticmethod
    def delete_doctor(doctor_id: int) -> None:
        doctor = DoctorSelector.get_doctor_by_id(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")

        try:
            with transaction.atomic():
                doctor.delete()
        except ProtectedError:
            raise ConflictError(
                "Cannot delete a doctor with existing appointments. Deactivate the profile instead."
            )
        FileStorageService.delete(doctor.image)
        logger.info(f"Doctor profile deleted: ID {doctor_id}")
