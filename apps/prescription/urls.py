from django.urls import path

from . import views

app_name = "prescriptions"

urlpatterns = [
    path("prescriptions", views.prescriptions, name="prescriptions"),
    path("prescriptions/<int:prescription_id>", views.prescription_detail, name="prescription_detail"),
]
