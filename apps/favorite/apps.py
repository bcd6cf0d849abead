from django.apps import AppConfig


class FavoriteConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.favorite"
    label = "favorite"
