from datetime import timedelta
from decimal import Decimal
from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from PIL import Image
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from apps.account.credentials import CredentialService
from apps.account.models import Doctor, DoctorRegistrationRequest, User
from apps.account.services import validate_password
from apps.appointment.models import Appointment
from apps.review.models import Review

from .conftest import PASSWORD, make_user

pytestmark = pytest.mark.django_db


def bearer(token):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.mark.parametrize(
    "password,valid",
    [("Secret123!", True), ("short1!", False), ("nouppercase1!", False), ("NoDigits!!", False), ("NoSpecial123", False)],
)
def test_password_rules(password, valid):
    assert validate_password(password)[0] is valid


class TestRegistration:
    def test_patient_registration(self, anon_client):
        response = anon_client.post(
            "/api/auth/register",
            {"name": "New Patient", "email": "New@Example.com", "password": PASSWORD},
            format="json",
        )

        assert response.status_code == 201
        user = User.objects.get(email="new@example.com")
        assert user.role == "patient"
        assert user.status == "approved"
        assert user.password != PASSWORD
        assert "password" not in response.json()["user"]

    def test_duplicate_email(self, anon_client, patient):
        response = anon_client.post(
            "/api/auth/register",
            {"name": "Again", "email": patient.email, "password": PASSWORD},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    def test_admin_role_rejected(self, anon_client):
        response = anon_client.post(
            "/api/auth/register",
            {"name": "Boss", "email": "boss@example.com", "password": PASSWORD, "role": "admin"},
            format="json",
        )
        assert response.status_code == 403

    def test_weak_password(self, anon_client):
        response = anon_client.post(
            "/api/auth/register",
            {"name": "Weak", "email": "weak@example.com", "password": "password"},
            format="json",
        )
        assert response.status_code == 400

    def test_doctor_application_flow(self, anon_client, admin_client):
        response = anon_client.post(
            "/api/auth/register",
            {
                "name": "Dr New",
                "email": "drnew@example.com",
                "password": PASSWORD,
                "role": "doctor",
                "specialization": "Neurology",
                "qualification": "MBBS",
                "experience": 4,
            },
            format="json",
        )
        assert response.status_code == 201
        user = User.objects.get(email="drnew@example.com")
        assert user.status == "pending"

        pending = admin_client.get("/api/auth/pending-doctors").json()
        assert pending["count"] == 1
        request_id = pending["requests"][0]["id"]

        approved = admin_client.post(f"/api/auth/approve-doctor/{request_id}")
        assert approved.status_code == 200

        user.refresh_from_db()
        assert user.status == "approved"
        doctor = Doctor.objects.get(user=user)
        assert doctor.specialization == "Neurology"
        assert doctor.experience == 4

        again = admin_client.post(f"/api/auth/approve-doctor/{request_id}")
        assert again.status_code == 400

    def test_doctor_rejection(self, admin_client):
        user = make_user("reject@example.com", role="doctor", status="pending")
        application = DoctorRegistrationRequest.objects.create(
            user=user, specialization="ENT", qualification="MBBS"
        )

        response = admin_client.post(f"/api/auth/reject-doctor/{application.id}", {}, format="json")

        assert response.status_code == 200
        application.refresh_from_db()
        user.refresh_from_db()
        assert application.rejection_reason == "Application rejected by admin"
        assert user.status == "rejected"
        assert not Doctor.objects.filter(user=user).exists()

    def test_doctor_requires_specialization(self, anon_client):
        response = anon_client.post(
            "/api/auth/register",
            {"name": "Dr X", "email": "x@example.com", "password": PASSWORD, "role": "doctor"},
            format="json",
        )
        assert response.status_code == 400


class TestLogin:
    def test_login_issues_tokens_and_cookie(self, anon_client, patient):
        response = anon_client.post(
            "/api/auth/login", {"email": patient.email, "password": PASSWORD}, format="json"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"]
        assert response.cookies["refresh_token"].value == body["refresh_token"]
        assert response.cookies["refresh_token"]["httponly"]

        me = bearer(body["access_token"]).get("/api/profile")
        assert me.status_code == 200
        assert me.json()["user"]["email"] == patient.email

    def test_wrong_password(self, anon_client, patient):
        response = anon_client.post(
            "/api/auth/login", {"email": patient.email, "password": "Wrong123!"}, format="json"
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_refresh_and_logout(self, patient):
        refresh_token, _ = CredentialService.issue_refresh_token(patient)
        client = APIClient()

        refreshed = client.post("/api/auth/refresh", {"refresh_token": refresh_token}, format="json")
        assert refreshed.status_code == 200
        access_token = refreshed.json()["access_token"]

        logout = bearer(access_token).post(
            "/api/auth/logout", {"refresh_token": refresh_token}, format="json"
        )
        assert logout.status_code == 200

        again = client.post("/api/auth/refresh", {"refresh_token": refresh_token}, format="json")
        assert again.status_code == 401

    def test_expired_refresh_token(self, patient):
        refresh_token, _ = CredentialService.issue_refresh_token(patient)
        User.objects.filter(id=patient.id).update(
            refresh_token_expiry=timezone.now() - timedelta(minutes=1)
        )

        response = APIClient().post(
            "/api/auth/refresh", {"refresh_token": refresh_token}, format="json"
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired refresh token"

    def test_missing_refresh_token(self, anon_client):
        response = anon_client.post("/api/auth/refresh", {}, format="json")
        assert response.json()["message"] == "Refresh token not provided"


class TestAccessToken:
    def test_expired_token_code(self, patient):
        token = AccessToken.for_user(patient)
        token.set_exp(from_time=timezone.now() - timedelta(hours=2))

        response = bearer(str(token)).get("/api/profile")

        assert response.status_code == 401
        assert response.json()["code"] == "TOKEN_EXPIRED"

    def test_garbage_token(self):
        response = bearer("not-a-token").get("/api/profile")

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_pending_account_is_blocked(self):
        user = make_user("waiting@example.com", role="doctor", status="pending")

        response = bearer(CredentialService.issue_access_token(user)).get("/api/profile")

        assert response.status_code == 403
        assert response.json()["message"] == "Account not approved. Please wait for admin approval."

    def test_role_claim(self, doctor_user):
        token = AccessToken(CredentialService.issue_access_token(doctor_user))
        assert token["role"] == "doctor"


class TestUserManagement:
    def test_admin_lists_users(self, admin_client, patient, doctor_user):
        response = admin_client.get("/api/users?role=patient")

        assert response.status_code == 200
        assert [u["email"] for u in response.json()["users"]] == [patient.email]

    def test_stats(self, admin_client, patient, doctor_user):
        stats = admin_client.get("/api/users/stats").json()
        assert stats["total_users"] == 3
        assert stats["total_doctors"] == 1

    def test_admin_cannot_delete_admin(self, admin_client):
        other_admin = make_user("admin2@example.com", role="admin")

        response = admin_client.delete(f"/api/users/{other_admin.id}")

        assert response.status_code == 403
        assert User.objects.filter(id=other_admin.id).exists()

    def test_admin_deletes_patient(self, admin_client, patient):
        assert admin_client.delete(f"/api/users/{patient.id}").status_code == 200
        assert not User.objects.filter(id=patient.id).exists()

    def test_deleting_patient_keeps_history_and_rating(
        self, admin_client, patient, patient_client, doctor, completed_appointment
    ):
        patient_client.post(
            "/api/reviews",
            {"appointment_id": completed_appointment.id, "rating": 5},
            format="json",
        )

        response = admin_client.delete(f"/api/users/{patient.id}")

        assert response.status_code == 200
        completed_appointment.refresh_from_db()
        assert completed_appointment.patient_id is None
        assert completed_appointment.patient_name == patient.name

        review = Review.objects.get(appointment=completed_appointment)
        assert review.patient_id is None
        doctor.refresh_from_db()
        approved = Review.objects.filter(doctor=doctor, status="approved").count()
        assert doctor.total_reviews == approved == 1
        assert doctor.rating == Decimal("5.0")

        listing = APIClient().get(f"/api/reviews/doctor/{doctor.id}").json()
        assert listing["reviews"][0]["patient"]["name"] == "Former patient"

    def test_doctor_with_appointments_cannot_be_deleted(self, admin_client, doctor_user, appointment):
        response = admin_client.delete(f"/api/users/{doctor_user.id}")

        assert response.status_code == 400
        assert User.objects.filter(id=doctor_user.id).exists()
        assert Appointment.objects.filter(id=appointment.id).exists()

    def test_update_status(self, admin_client, patient):
        response = admin_client.put(
            f"/api/users/{patient.id}/status", {"status": "rejected"}, format="json"
        )
        assert response.status_code == 200
        patient.refresh_from_db()
        assert patient.status == "rejected"

    def test_patient_cannot_list_users(self, patient_client):
        assert patient_client.get("/api/users").status_code == 403


class TestDoctors:
    def test_public_directory(self, anon_client, doctor, other_doctor):
        other_doctor.is_active = False
        other_doctor.save()

        response = anon_client.get("/api/doctors?specialization=cardio")

        assert response.status_code == 200
        assert [d["id"] for d in response.json()["doctors"]] == [doctor.id]

    def test_missing_doctor(self, anon_client):
        assert anon_client.get("/api/doctors/9999").status_code == 404

    def test_admin_creates_profile(self, admin_client):
        user = make_user("newdoc@example.com", role="doctor")
        response = admin_client.post(
            "/api/doctors",
            {"user_id": user.id, "specialization": "ENT", "consultation_fee": "300"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["doctor"]["consultation_fee"] == 300.0

    def test_profile_with_appointments_cannot_be_deleted(self, admin_client, doctor, appointment):
        response = admin_client.delete(f"/api/doctors/{doctor.id}")

        assert response.status_code == 400
        assert Doctor.objects.filter(id=doctor.id).exists()

    def test_profile_without_appointments_is_deleted(self, admin_client, other_doctor):
        assert admin_client.delete(f"/api/doctors/{other_doctor.id}").status_code == 200
        assert not Doctor.objects.filter(id=other_doctor.id).exists()

    def test_patient_cannot_create(self, patient_client, patient):
        response = patient_client.post(
            "/api/doctors", {"user_id": patient.id, "specialization": "ENT"}, format="json"
        )
        assert response.status_code == 403


class TestProfile:
    def test_update_profile(self, patient_client, patient):
        response = patient_client.put(
            "/api/profile", {"phone": "555-0100", "gender": "female", "role": "admin"}, format="json"
        )

        assert response.status_code == 200
        patient.refresh_from_db()
        assert patient.phone == "555-0100"
        assert patient.role == "patient"

    @pytest.mark.parametrize("payload", [{"phone": 5550100}, {"phone": "5" * 21}, {"name": ["x"]}])
    def test_malformed_profile_fields(self, patient_client, patient, payload):
        response = patient_client.put("/api/profile", payload, format="json")

        assert response.status_code == 400
        patient.refresh_from_db()
        assert patient.phone == ""

    def test_register_with_non_string_name(self, anon_client):
        response = anon_client.post(
            "/api/auth/register",
            {"name": 42, "email": "n@example.com", "password": PASSWORD},
            format="json",
        )
        assert response.status_code == 400

    def test_doctor_profile_included(self, doctor_client, doctor):
        response = doctor_client.get("/api/profile")
        assert response.json()["doctor_profile"]["id"] == doctor.id

    def test_upload_picture(self, patient_client, patient, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path
        buffer = BytesIO()
        Image.new("RGB", (1200, 900), "white").save(buffer, format="PNG")
        upload = SimpleUploadedFile("me.png", buffer.getvalue(), content_type="image/png")

        response = patient_client.post("/api/profile/picture", {"image": upload}, format="multipart")

        assert response.status_code == 200
        patient.refresh_from_db()
        assert patient.profile_picture.startswith("/media/profiles/")

    def test_upload_without_file(self, patient_client):
        response = patient_client.post("/api/profile/picture", {}, format="multipart")
        assert response.status_code == 400
