from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Doctor, DoctorRegistrationRequest, User


class UserAdmin(BaseUserAdmin):
    list_display = ("id", "name", "email", "phone", "role", "status", "is_active")
    list_filter = ("role", "status", "is_active", "is_staff", "is_superuser")
    search_fields = ("name", "email", "phone")
    ordering = ("-created_at",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            "Personal info",
            {
                "fields": (
                    "name",
                    "phone",
                    "address",
                    "date_of_birth",
                    "gender",
                    "profile_picture",
                )
            },
        ),
        ("Role", {"fields": ("role", "status")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "role", "password1", "password2"),
            },
        ),
    )


class DoctorAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "specialization",
        "experience",
        "consultation_fee",
        "rating",
        "total_reviews",
        "is_active",
    )
    list_filter = ("specialization", "is_active")
    search_fields = ("user__name", "specialization")
    readonly_fields = ("rating", "total_reviews", "approved_by", "approved_at")
    ordering = ("-created_at",)


class DoctorRegistrationRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "specialization", "qualification", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("user__name", "user__email", "specialization")
    ordering = ("-created_at",)


admin.site.register(User, UserAdmin)
admin.site.register(Doctor, DoctorAdmin)
admin.site.register(DoctorRegistrationRequest, DoctorRegistrationRequestAdmin)
