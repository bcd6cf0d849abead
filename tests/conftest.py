from datetime import date, timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.account.credentials import CredentialService
from apps.account.models import Doctor, User
from apps.appointment.models import Appointment
from core.enum import AccountStatus, AppointmentStatus, AppointmentType, UserType

PASSWORD = "Secret123!"


def make_user(email, role=UserType.PATIENT.value, status=AccountStatus.APPROVED.value, name=None):
    return User.objects.create(
        name=name or email.split("@")[0].title(),
        email=email,
        password=CredentialService.hash_password(PASSWORD),
        role=role,
        status=status,
    )


def make_appointment(patient, doctor, status=AppointmentStatus.PENDING.value, **extra):
    values = {
        "patient_name": patient.name,
        "patient_email": patient.email,
        "appointment_date": date.today() + timedelta(days=3),
        "appointment_time": "10:00",
        "appointment_type": AppointmentType.ONLINE.value,
        "status": status,
    }
    values.update(extra)
    return Appointment.objects.create(patient=patient, doctor=doctor, **values)


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def patient(db):
    return make_user("patient@example.com", name="Pat Ient")


@pytest.fixture
def other_patient(db):
    return make_user("other@example.com", name="Oth Er")


@pytest.fixture
def admin_user(db):
    return make_user("admin@example.com", role=UserType.ADMIN.value, name="Ad Min")


@pytest.fixture
def doctor_user(db):
    return make_user("doctor@example.com", role=UserType.DOCTOR.value, name="Doc Tor")


@pytest.fixture
def doctor(doctor_user):
    return Doctor.objects.create(
        user=doctor_user,
        specialization="Cardiology",
        qualification="MBBS, MD",
        experience=10,
        consultation_fee=Decimal("500.00"),
    )


@pytest.fixture
def other_doctor(db):
    user = make_user("doctor2@example.com", role=UserType.DOCTOR.value, name="Sec Ond")
    return Doctor.objects.create(user=user, specialization="Dermatology")


@pytest.fixture
def appointment(patient, doctor):
    return make_appointment(patient, doctor)


@pytest.fixture
def completed_appointment(patient, doctor):
    return make_appointment(patient, doctor, status=AppointmentStatus.COMPLETED.value)


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def patient_client(patient):
    return client_for(patient)


@pytest.fixture
def other_patient_client(other_patient):
    return client_for(other_patient)


@pytest.fixture
def doctor_client(doctor, doctor_user):
    return client_for(doctor_user)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)
