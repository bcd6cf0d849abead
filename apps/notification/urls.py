from django.urls import path

from . import views

app_name = "notifications"

urlpatterns = [
    path("notifications", views.get_notifications, name="notifications"),
    path("notifications/read-all", views.mark_all_as_read, name="read_all"),
    path("notifications/<int:notification_id>/read", views.mark_as_read, name="read"),
    path("notifications/<int:notification_id>", views.delete_notification, name="delete"),
]
