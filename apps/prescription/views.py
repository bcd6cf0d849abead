import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from core.exceptions import AuthorizationError
from core.policies import AccessPolicy
from core.responses import standardize_response

from .services import PrescriptionServices

logger = logging.getLogger(__name__)

prescription_services = PrescriptionServices()


def serialize_prescription(prescription) -> dict:
    appointment = prescription.appointment
    doctor, patient = prescription.doctor, prescription.patient
    return {
        "id": prescription.id,
        "appointment": {
            "id": appointment.id,
            "appointment_date": appointment.appointment_date,
            "appointment_time": appointment.appointment_time,
        },
        "doctor": {
            "id": prescription.doctor_id,
            "name": doctor.name if doctor else "",
        },
        "patient": {
            "id": prescription.patient_id,
            "name": patient.name if patient else appointment.patient_name,
            "email": patient.email if patient else appointment.patient_email,
        },
        "medications": prescription.medications,
        "instructions": prescription.instructions,
        "follow_up_date": prescription.follow_up_date,
        "created_at": prescription.created_at,
        "updated_at": prescription.updated_at,
    }


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def prescriptions(request):
    """
    POST /api/prescriptions  issue a prescription (owning doctor)
    GET  /api/prescriptions  own prescriptions (patient) or issued ones (doctor)

    Expected payload:
    {
        "appointment_id": 12,
        "medications": [
            {"name": "Paracetamol", "dosage": "500mg", "frequency": "3x daily", "duration": "5 days"}
        ],
        "instructions": "After meals",
        "follow_up_date": "2024-04-01"
    }
    """
    if request.method == "POST":
        if not AccessPolicy.is_doctor(request.user):
            raise AuthorizationError("Access denied. Doctors only.")
        prescription = prescription_services.create_prescription(request.user, request.data)
        return standardize_response(
            True,
            "Prescription created successfully",
            {"prescription": serialize_prescription(prescription)},
            status_code=status.HTTP_201_CREATED,
        )

    data = [
        serialize_prescription(p)
        for p in prescription_services.list_prescriptions(request.user)
    ]
    return standardize_response(
        True,
        "Prescriptions retrieved successfully",
        {"prescriptions": data, "count": len(data)},
    )


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def prescription_detail(request, prescription_id):
    if request.method == "PUT":
        prescription = prescription_services.update_prescription(
            request.user, prescription_id, request.data
        )
        message = "Prescription updated successfully"
    else:
        prescription = prescription_services.get_prescription(request.user, prescription_id)
        message = "Prescription retrieved successfully"

    return standardize_response(
        True, message, {"prescription": serialize_prescription(prescription)}
    )
