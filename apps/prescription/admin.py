from django.contrib import admin

from .models import Prescription


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ("id", "appointment", "doctor", "patient", "follow_up_date", "created_at")
    search_fields = ("doctor__name", "patient__name", "instructions")
    ordering = ("-created_at",)
