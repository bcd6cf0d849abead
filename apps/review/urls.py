from django.urls import path

from . import views

app_name = "reviews"

urlpatterns = [
    path("reviews", views.create_review, name="create_review"),
    path("reviews/doctor/<int:doctor_id>", views.doctor_reviews, name="doctor_reviews"),
    path("reviews/<int:review_id>", views.review_detail, name="review_detail"),
    path("reviews/<int:review_id>/moderate", views.moderate_review, name="moderate_review"),
]
