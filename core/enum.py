from enum import Enum


class BaseEnum(Enum):
    """
    Global Enum base class with utility methods:
    - choices(): for Django model field choices
    - value_list(): returns all enum values
    - has_value(): membership test on raw values
    """

    def __str__(self):
        # Default human-readable label
        return self.name.replace("_", " ").capitalize()

    @classmethod
    def choices(cls):
        """
        Returns a list of tuples for Django model fields:
        [(value, label), ...]
        """
        return [(member.value, str(member)) for member in cls]

    @classmethod
    def value_list(cls):
        """
        Returns a list of all enum values:
        [value1, value2, ...]
        """
        return [member.value for member in cls]

    @classmethod
    def has_value(cls, value) -> bool:
        return value in cls.value_list()


class UserType(BaseEnum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class AccountStatus(BaseEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Gender(BaseEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class AppointmentStatus(BaseEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class AppointmentType(BaseEnum):
    ONLINE = "online"
    IN_CLINIC = "in-clinic"


class ReviewStatus(BaseEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationStatus(BaseEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(BaseEnum):
    APPOINTMENT = "appointment"
    APPROVAL = "approval"
    REJECTION = "rejection"
    REMINDER = "reminder"
    PRESCRIPTION = "prescription"
    REVIEW = "review"
    SYSTEM = "system"
