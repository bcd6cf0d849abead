from django.contrib import admin

from .models import Favorite


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "doctor", "created_at")
    search_fields = ("user__name", "doctor__user__name")
