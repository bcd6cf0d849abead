import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.utils import timezone
from rest_framework_simplejwt.tokens import AccessToken

from .models import User

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Password hashing and token issuance.

    Access tokens are short-lived signed JWTs carrying the user id and role.
    Refresh tokens are opaque random strings stored on the account, so
    logging out or issuing a new one revokes the previous token.
    """

    REFRESH_TOKEN_BYTES = 64

    @staticmethod
    def hash_password(raw_password: str) -> str:
        return make_password(raw_password)

    @staticmethod
    def verify_password(user: User, raw_password: str) -> bool:
        return check_password(raw_password, user.password)

    @staticmethod
    def issue_access_token(user: User) -> str:
        token = AccessToken.for_user(user)
        token["role"] = user.role
        return str(token)

    @classmethod
    def issue_refresh_token(cls, user: User) -> Tuple[str, datetime]:
        refresh_token = secrets.token_hex(cls.REFRESH_TOKEN_BYTES)
        expiry = timezone.now() + timedelta(days=settings.JWT_REFRESH_DAYS)

        user.refresh_token = refresh_token
        user.refresh_token_expiry = expiry
        user.save(update_fields=["refresh_token", "refresh_token_expiry", "updated_at"])
        return refresh_token, expiry

    @staticmethod
    def get_user_by_refresh_token(refresh_token: str) -> Optional[User]:
        if not refresh_token:
            return None
        return User.objects.filter(
            refresh_token=refresh_token, refresh_token_expiry__gt=timezone.now()
        ).first()

    @staticmethod
    def revoke_refresh_token(refresh_token: str) -> None:
        updated = User.objects.filter(refresh_token=refresh_token).update(
            refresh_token=None, refresh_token_expiry=None
        )
        if updated:
            logger.info("Refresh token revoked")
