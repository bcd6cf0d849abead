from django.urls import path

from . import views

app_name = "bookings"

urlpatterns = [
    path("bookings", views.bookings, name="bookings"),
    path("bookings/my-appointments", views.my_appointments, name="my_appointments"),
    path("bookings/doctor-appointments", views.doctor_appointments, name="doctor_appointments"),
    path("bookings/<int:appointment_id>", views.booking_detail, name="booking_detail"),
    path("bookings/<int:appointment_id>/cancel", views.cancel_booking, name="cancel"),
    path("bookings/<int:appointment_id>/reschedule", views.reschedule_booking, name="reschedule"),
    path("bookings/<int:appointment_id>/confirm", views.confirm_booking, name="confirm"),
    path("bookings/<int:appointment_id>/complete", views.complete_booking, name="complete"),
    path(
        "bookings/<int:appointment_id>/consultation-notes",
        views.consultation_notes,
        name="consultation_notes",
    ),
]
