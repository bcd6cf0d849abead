from django.urls import path

from . import views

app_name = "favorites"

urlpatterns = [
    path("favorites", views.favorites, name="favorites"),
    path("favorites/<int:doctor_id>", views.remove_favorite, name="remove_favorite"),
    path("favorites/check/<int:doctor_id>", views.check_favorite, name="check_favorite"),
]
