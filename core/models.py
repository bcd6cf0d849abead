from django.db import models


class BaseModel(models.Model):
    """Abstract base carrying creation/update timestamps for every table"""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
