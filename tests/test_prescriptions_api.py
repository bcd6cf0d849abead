import pytest

from apps.notification.models import Notification
from apps.prescription.models import Prescription

from .conftest import client_for, make_appointment

pytestmark = pytest.mark.django_db

MEDICATIONS = [
    {"name": "Paracetamol", "dosage": "500mg", "frequency": "3x daily", "duration": "5 days"}
]


def post_prescription(client, appointment, **extra):
    payload = {"appointment_id": appointment.id, "medications": MEDICATIONS}
    payload.update(extra)
    return client.post("/api/prescriptions", payload, format="json")


class TestCreatePrescription:
    def test_owning_doctor_issues_prescription(self, doctor_client, doctor_user, patient, appointment):
        response = post_prescription(
            doctor_client, appointment, instructions="After meals", follow_up_date="2030-01-10"
        )

        assert response.status_code == 201
        body = response.json()["prescription"]
        assert body["doctor"]["id"] == doctor_user.id
        assert body["patient"]["id"] == patient.id
        assert body["medications"] == MEDICATIONS

        appointment.refresh_from_db()
        assert appointment.prescription_id == body["id"]

    def test_patient_is_notified(self, doctor_client, patient, appointment):
        post_prescription(doctor_client, appointment)
        assert Notification.objects.filter(user=patient, type="prescription").count() == 1

    def test_second_prescription_replaces_link(self, doctor_client, appointment):
        first = post_prescription(doctor_client, appointment).json()["prescription"]["id"]
        second = post_prescription(doctor_client, appointment).json()["prescription"]["id"]

        appointment.refresh_from_db()
        assert appointment.prescription_id == second
        assert Prescription.objects.filter(id=first).exists()

    def test_cancelled_appointment(self, doctor_client, patient, doctor):
        appointment = make_appointment(patient, doctor, status="cancelled")
        response = post_prescription(doctor_client, appointment)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot create prescription for cancelled appointments"

    def test_other_doctor(self, other_doctor, appointment):
        response = post_prescription(client_for(other_doctor.user), appointment)

        assert response.status_code == 403
        assert (
            response.json()["message"]
            == "You can only create prescriptions for your own appointments"
        )

    def test_patient_cannot_prescribe(self, patient_client, appointment):
        assert post_prescription(patient_client, appointment).status_code == 403

    def test_incomplete_medication(self, doctor_client, appointment):
        response = post_prescription(
            doctor_client, appointment, medications=[{"name": "Paracetamol"}]
        )
        assert response.status_code == 400

    def test_missing_appointment(self, doctor_client):
        response = doctor_client.post(
            "/api/prescriptions", {"appointment_id": 9999, "medications": MEDICATIONS}, format="json"
        )
        assert response.status_code == 404


class TestReadPrescriptions:
    @pytest.fixture
    def prescription(self, doctor_client, appointment):
        response = post_prescription(doctor_client, appointment)
        return Prescription.objects.get(id=response.json()["prescription"]["id"])

    def test_patient_lists_own(self, patient_client, other_patient_client, prescription):
        assert patient_client.get("/api/prescriptions").json()["count"] == 1
        assert other_patient_client.get("/api/prescriptions").json()["count"] == 0

    def test_doctor_lists_issued(self, doctor_client, prescription):
        assert doctor_client.get("/api/prescriptions").json()["count"] == 1

    def test_admin_cannot_list(self, admin_client, prescription):
        assert admin_client.get("/api/prescriptions").status_code == 403

    def test_detail_access(self, patient_client, other_patient_client, admin_client, prescription):
        url = f"/api/prescriptions/{prescription.id}"
        assert patient_client.get(url).status_code == 200
        assert admin_client.get(url).status_code == 200
        assert other_patient_client.get(url).status_code == 403

    def test_author_updates(self, doctor_client, prescription):
        response = doctor_client.put(
            f"/api/prescriptions/{prescription.id}",
            {"instructions": "Before sleep"},
            format="json",
        )

        assert response.status_code == 200
        prescription.refresh_from_db()
        assert prescription.instructions == "Before sleep"

    def test_patient_cannot_update(self, patient_client, prescription):
        response = patient_client.put(
            f"/api/prescriptions/{prescription.id}", {"instructions": "x"}, format="json"
        )
        assert response.status_code == 403
