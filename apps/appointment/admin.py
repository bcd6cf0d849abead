from django.contrib import admin
from .models import Appointment


class AppointmentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient_name",
        "doctor_name",
        "appointment_date",
        "appointment_time",
        "appointment_type",
        "status",
        "created_at",
    )
    list_filter = ("status", "appointment_type", "appointment_date")
    search_fields = (
        "patient_name",
        "patient_email",
        "doctor__user__name",
        "notes",
        "symptoms",
    )
    readonly_fields = ("cancelled_at", "cancelled_by", "google_calendar_event_id", "apple_calendar_event_id")
    ordering = ("-created_at",)
    date_hierarchy = "appointment_date"

    def doctor_name(self, obj):
        return obj.doctor.user.name

    doctor_name.short_description = "Doctor"


admin.site.register(Appointment, AppointmentAdmin)
