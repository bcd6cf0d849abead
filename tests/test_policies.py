import pytest

from core.exceptions import AccountNotApproved, AuthorizationError, DoctorProfileNotFound
from core.policies import AccessPolicy

from .conftest import make_user


@pytest.mark.django_db
class TestAccessPolicy:
    def test_pending_account_is_not_approved(self):
        user = make_user("pending@example.com", role="doctor", status="pending")
        with pytest.raises(AccountNotApproved):
            AccessPolicy.ensure_approved(user)

    def test_only_patients_book(self, doctor_user, admin_user, patient):
        AccessPolicy.ensure_can_book(patient)
        for user in (doctor_user, admin_user):
            with pytest.raises(AuthorizationError):
                AccessPolicy.ensure_can_book(user)

    def test_view_appointment(self, appointment, patient, other_patient, doctor_user, admin_user, other_doctor):
        AccessPolicy.ensure_can_view_appointment(patient, appointment)
        AccessPolicy.ensure_can_view_appointment(doctor_user, appointment)
        AccessPolicy.ensure_can_view_appointment(admin_user, appointment)

        with pytest.raises(AuthorizationError):
            AccessPolicy.ensure_can_view_appointment(other_patient, appointment)
        with pytest.raises(AuthorizationError):
            AccessPolicy.ensure_can_view_appointment(other_doctor.user, appointment)

    def test_doctor_without_profile(self, appointment):
        orphan = make_user("orphan@example.com", role="doctor")
        with pytest.raises(DoctorProfileNotFound):
            AccessPolicy.ensure_can_complete(orphan, appointment)

    def test_patient_cannot_complete(self, appointment, patient):
        with pytest.raises(AuthorizationError):
            AccessPolicy.ensure_can_complete(patient, appointment)

    def test_modify_booking_message(self, appointment, other_patient):
        with pytest.raises(AuthorizationError, match="You can only cancel your own appointments"):
            AccessPolicy.ensure_can_modify_booking(other_patient, appointment, "cancel")

    def test_admin_users_cannot_be_deleted(self, admin_user):
        other_admin = make_user("admin2@example.com", role="admin")
        with pytest.raises(AuthorizationError, match="Cannot delete admin users"):
            AccessPolicy.ensure_can_delete_user(admin_user, other_admin)
