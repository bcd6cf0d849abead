from django.urls import include, path

from . import views

app_name = "account"

# Authentication and doctor applications
auth_patterns = [
    path("register", views.register_user, name="register"),
    path("login", views.login_user, name="login"),
    path("refresh", views.refresh_token, name="refresh"),
    path("logout", views.logout_user, name="logout"),
    path("create-admin", views.create_admin, name="create_admin"),
    path("pending-doctors", views.pending_doctors, name="pending_doctors"),
    path("approve-doctor/<int:request_id>", views.approve_doctor, name="approve_doctor"),
    path("reject-doctor/<int:request_id>", views.reject_doctor, name="reject_doctor"),
]

# User management (admin only)
user_patterns = [
    path("stats", views.get_user_stats, name="user_stats"),
    path("<int:user_id>", views.user_detail, name="user_detail"),
    path("<int:user_id>/status", views.update_user_status, name="user_status"),
]

doctor_patterns = [
    path("<int:doctor_id>", views.doctor_detail, name="doctor_detail"),
]

profile_patterns = [
    path("picture", views.upload_profile_picture, name="profile_picture"),
]

urlpatterns = [
    path("auth/", include((auth_patterns, "auth"))),
    path("users", views.get_users_list, name="users_list"),
    path("users/", include((user_patterns, "users"))),
    path("doctors", views.doctors, name="doctors"),
    path("doctors/", include((doctor_patterns, "doctors"))),
    path("profile", views.profile, name="profile"),
    path("profile/", include((profile_patterns, "profile"))),
]
