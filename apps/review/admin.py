from django.contrib import admin

from .models import Review
from .rating import RatingAggregator


class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "doctor", "patient", "rating", "status", "created_at")
    list_filter = ("status", "rating")
    search_fields = ("doctor__user__name", "patient__name", "comment")
    ordering = ("-created_at",)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        RatingAggregator.recompute(obj.doctor_id)

    def delete_model(self, request, obj):
        doctor_id = obj.doctor_id
        super().delete_model(request, obj)
        RatingAggregator.recompute(doctor_id)


admin.site.register(Review, ReviewAdmin)
