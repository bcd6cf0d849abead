from decimal import Decimal

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from core.enum import AccountStatus, Gender, RegistrationStatus, UserType
from core.models import BaseModel


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", UserType.ADMIN.value)
        extra_fields.setdefault("status", AccountStatus.APPROVED.value)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser, BaseModel):
    username = None

    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    role = models.CharField(
        max_length=10, choices=UserType.choices(), default=UserType.PATIENT.value
    )
    status = models.CharField(
        max_length=10,
        choices=AccountStatus.choices(),
        default=AccountStatus.APPROVED.value,
    )
    profile_picture = models.CharField(max_length=500, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices(), blank=True)
    refresh_token = models.CharField(max_length=128, null=True, blank=True)
    refresh_token_expiry = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]

    def __str__(self):
        return self.name or self.email


class Doctor(BaseModel):
    user = models.OneToOneField(
        User, on_delete=models.CASCADE, related_name="doctor_profile"
    )
    specialization = models.CharField(max_length=100)
    qualification = models.CharField(max_length=255, blank=True)
    experience = models.PositiveIntegerField(default=0)
    # {"monday": ["10:00-11:00", ...], ...}
    availability = models.JSONField(default=dict, blank=True)
    bio = models.TextField(blank=True)
    image = models.CharField(max_length=500, blank=True)
    consultation_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0")
    )
    # Derived from approved reviews, see apps.review.rating
    rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0"))
    total_reviews = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_doctors",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "doctors"
        ordering = ["-rating", "-total_reviews"]

    def __str__(self):
        return f"Dr. {self.user.name}"


class DoctorRegistrationRequest(BaseModel):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="registration_requests"
    )
    specialization = models.CharField(max_length=100)
    qualification = models.CharField(max_length=255)
    experience = models.PositiveIntegerField(default=0)
    bio = models.TextField(blank=True)
    status = models.CharField(
        max_length=10,
        choices=RegistrationStatus.choices(),
        default=RegistrationStatus.PENDING.value,
    )
    rejection_reason = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_registration_requests",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "doctor_registration_requests"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user.name} - {self.status}"
