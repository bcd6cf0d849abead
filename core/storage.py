import logging
import os
import uuid
from io import BytesIO
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class FileStorageService:
    """Image uploads for profile pictures and doctor photos"""

    MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
    MAX_DIMENSION = 800
    ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/jpg", "image/png")

    @classmethod
    def validate_image(cls, image_file) -> None:
        if image_file.size > cls.MAX_IMAGE_SIZE:
            raise ValidationError("Image file size must be less than 5MB")

        content_type = getattr(image_file, "content_type", None)
        if content_type and content_type not in cls.ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only JPEG and PNG images are allowed")

    @classmethod
    def upload(cls, image_file, folder: str = "profiles") -> str:
        """
        Resize and store an image, returning its public URL
        """
        cls.validate_image(image_file)

        file_extension = os.path.splitext(image_file.name)[1].lower() or ".png"
        filename = f"{folder}/{uuid.uuid4().hex}{file_extension}"

        try:
            image = Image.open(image_file)
            if image.width > cls.MAX_DIMENSION or image.height > cls.MAX_DIMENSION:
                image.thumbnail(
                    (cls.MAX_DIMENSION, cls.MAX_DIMENSION), Image.Resampling.LANCZOS
                )

            output = BytesIO()
            if file_extension in (".jpg", ".jpeg"):
                image.convert("RGB").save(output, format="JPEG", quality=85, optimize=True)
            else:
                image.save(output, format="PNG", optimize=True)
            output.seek(0)
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Error processing image: {str(e)}")

        saved_path = default_storage.save(filename, ContentFile(output.read()))
        logger.info(f"Image saved: {saved_path}")
        return default_storage.url(saved_path)

    @staticmethod
    def owns(url: Optional[str]) -> bool:
        return bool(url) and url.startswith(settings.MEDIA_URL)

    @classmethod
    def delete(cls, url: Optional[str]) -> None:
        """Remove a stored file; URLs not served by our storage are ignored"""
        if not cls.owns(url):
            return

        path = url[len(settings.MEDIA_URL):]
        if default_storage.exists(path):
            default_storage.delete(path)
            logger.info(f"Image deleted: {path}")
