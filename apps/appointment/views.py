import logging
from datetime import datetime

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from core.exceptions import AuthorizationError, ValidationError
from core.permissions import IsAdmin, IsDoctor, IsPatient
from core.responses import standardize_response

from .selectors import AppointmentSelector
from .services import AppointmentServices

logger = logging.getLogger(__name__)

appointment_services = AppointmentServices()


def serialize_appointment(appointment) -> dict:
    doctor = appointment.doctor
    return {
        "id": appointment.id,
        "doctor": {
            "id": doctor.id,
            "user_id": doctor.user_id,
            "name": doctor.user.name,
            "specialization": doctor.specialization,
            "image": doctor.image,
            "consultation_fee": float(doctor.consultation_fee),
        },
        "patient_id": appointment.patient_id,
        "patient_name": appointment.patient_name,
        "patient_email": appointment.patient_email,
        "patient_phone": appointment.patient_phone,
        "appointment_date": appointment.appointment_date,
        "appointment_time": appointment.appointment_time,
        "appointment_type": appointment.appointment_type,
        "status": appointment.status,
        "symptoms": appointment.symptoms,
        "consultation_notes": appointment.notes,
        "prescription_id": appointment.prescription_id,
        "cancelled_at": appointment.cancelled_at,
        "cancellation_reason": appointment.cancellation_reason,
        "cancelled_by_id": appointment.cancelled_by_id,
        "google_calendar_event_id": appointment.google_calendar_event_id,
        "apple_calendar_event_id": appointment.apple_calendar_event_id,
        "created_at": appointment.created_at,
        "updated_at": appointment.updated_at,
    }


def _build_filters(request) -> dict:
    filters = {}
    for param in ["status", "doctor_id", "patient_id", "search"]:
        value = request.GET.get(param, "").strip()
        if value:
            filters[param] = value

    for param in ["date_from", "date_to"]:
        value = request.GET.get(param, "").strip()
        if value:
            try:
                filters[param] = datetime.strptime(value, "%Y-%m-%d").date()
            except ValueError:
                raise ValidationError(f"Invalid {param} format. Use YYYY-MM-DD")
    return filters


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def bookings(request):
    """
    POST /api/bookings  book an appointment (patients)
    GET  /api/bookings  every appointment, paginated (admins)

    Expected payload:
    {
        "doctor_id": 1,
        "appointment_date": "2024-03-15",
        "appointment_time": "10:00",
        "appointment_type": "online",
        "symptoms": "Having fever and headache"
    }
    """
    if request.method == "POST":
        appointment = appointment_services.book_appointment(request.user, request.data)
        return standardize_response(
            True,
            "Appointment booked successfully",
            {"appointment": serialize_appointment(appointment)},
            status_code=status.HTTP_201_CREATED,
        )

    if not IsAdmin().has_permission(request, None):
        raise AuthorizationError(IsAdmin.message)

    try:
        page = int(request.GET.get("page", 1))
        limit = min(int(request.GET.get("limit", 20)), 100)
    except ValueError:
        raise ValidationError("Invalid query parameters")

    result = AppointmentSelector.get_all_appointments_with_pagination(
        page, limit, _build_filters(request)
    )
    result["appointments"] = [serialize_appointment(a) for a in result["appointments"]]
    return standardize_response(True, "Appointments retrieved successfully", result)


@api_view(["GET"])
@permission_classes([IsPatient])
def my_appointments(request):
    """
    GET /api/bookings/my-appointments
    """
    appointments = AppointmentSelector.get_patient_appointments(
        request.user.id, _build_filters(request)
    )
    data = [serialize_appointment(a) for a in appointments]
    return standardize_response(
        True,
        "Appointments retrieved successfully",
        {"appointments": data, "count": len(data)},
    )


@api_view(["GET"])
@permission_classes([IsDoctor])
def doctor_appointments(request):
    """
    GET /api/bookings/doctor-appointments
    """
    appointments = appointment_services.get_doctor_appointments(
        request.user, _build_filters(request)
    )
    data = [serialize_appointment(a) for a in appointments]
    return standardize_response(
        True,
        "Appointments retrieved successfully",
        {"appointments": data, "count": len(data)},
    )


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def booking_detail(request, appointment_id):
    """
    GET /api/bookings/{id}  owning patient, owning doctor or admin
    PUT /api/bookings/{id}  admin edit
    """
    if request.method == "PUT":
        appointment = appointment_services.update_appointment(
            request.user, appointment_id, request.data
        )
        message = "Appointment updated successfully"
    else:
        appointment = appointment_services.get_appointment(request.user, appointment_id)
        message = "Appointment details retrieved successfully"

    return standardize_response(
        True, message, {"appointment": serialize_appointment(appointment)}
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def cancel_booking(request, appointment_id):
    """
    PUT /api/bookings/{id}/cancel

    Expected payload:
    {
        "cancellation_reason": "Schedule conflict"
    }
    """
    appointment = appointment_services.cancel_appointment(
        request.user, appointment_id, request.data.get("cancellation_reason", "")
    )
    return standardize_response(
        True,
        "Appointment cancelled successfully",
        {"appointment": serialize_appointment(appointment)},
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def reschedule_booking(request, appointment_id):
    """
    PUT /api/bookings/{id}/reschedule

    Expected payload:
    {
        "appointment_date": "2024-03-20",
        "appointment_time": "14:00"
    }
    """
    appointment = appointment_services.reschedule_appointment(
        request.user,
        appointment_id,
        request.data.get("appointment_date"),
        request.data.get("appointment_time"),
    )
    return standardize_response(
        True,
        "Appointment rescheduled successfully",
        {"appointment": serialize_appointment(appointment)},
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def confirm_booking(request, appointment_id):
    appointment = appointment_services.confirm_appointment(request.user, appointment_id)
    return standardize_response(
        True,
        "Appointment confirmed successfully",
        {"appointment": serialize_appointment(appointment)},
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def complete_booking(request, appointment_id):
    appointment = appointment_services.complete_appointment(request.user, appointment_id)
    return standardize_response(
        True,
        "Appointment marked as completed",
        {"appointment": serialize_appointment(appointment)},
    )


@api_view(["PUT"])
@permission_classes([IsDoctor])
def consultation_notes(request, appointment_id):
    """
    PUT /api/bookings/{id}/consultation-notes

    Expected payload:
    {
        "consultation_notes": "Prescribed rest and fluids"
    }
    """
    appointment = appointment_services.add_consultation_notes(
        request.user, appointment_id, request.data.get("consultation_notes")
    )
    return standardize_response(
        True,
        "Consultation notes saved successfully",
        {"appointment": serialize_appointment(appointment)},
    )
