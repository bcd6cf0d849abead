from rest_framework.permissions import SAFE_METHODS, BasePermission

from core.enum import UserType


class _RolePermission(BasePermission):
    roles = ()

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and getattr(user, "role", None) in self.roles
        )


class IsAdmin(_RolePermission):
    message = "Access denied. Admin only."
    roles = (UserType.ADMIN.value,)


class IsPatient(_RolePermission):
    message = "Access denied. Patients only."
    roles = (UserType.PATIENT.value,)


class IsDoctor(_RolePermission):
    message = "Access denied. Doctors only."
    roles = (UserType.DOCTOR.value,)


class IsAdminOrReadOnly(BasePermission):
    """Public reads, admin-only writes"""

    message = IsAdmin.message

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return IsAdmin().has_permission(request, view)
