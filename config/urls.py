from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    return Response({"status": "OK", "message": "Server is running"})


# Swagger Urls
swagger_urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/swagger/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger_ui",
    ),
    path(
        "api/schema/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
]

# Custom Apps Urls
api_urlpatterns = [
    path("api/health", health_check, name="health"),
    path("api/", include("apps.account.urls")),
    path("api/", include("apps.appointment.urls")),
    path("api/", include("apps.review.urls")),
    path("api/", include("apps.prescription.urls")),
    path("api/", include("apps.favorite.urls")),
    path("api/", include("apps.notification.urls")),
]

urlpatterns = (
    [path("admin/", admin.site.urls)] + swagger_urlpatterns + api_urlpatterns
)

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
