import logging

import jwt
from django.utils import timezone
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

from core.exceptions import AuthenticationError, InvalidAccessToken, TokenExpired
from core.policies import AccessPolicy

logger = logging.getLogger(__name__)


def _token_has_expired(raw_token) -> bool:
    """Read the exp claim without trusting the token, only to pick the error code"""
    try:
        payload = jwt.decode(raw_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return False
    exp = payload.get("exp")
    return exp is not None and exp < timezone.now().timestamp()


class ApprovedAccountJWTAuthentication(JWTAuthentication):
    """
    Bearer access-token authentication that distinguishes expired tokens
    from invalid ones and rejects accounts that are not approved
    """

    def get_validated_token(self, raw_token):
        try:
            return super().get_validated_token(raw_token)
        except InvalidToken:
            if _token_has_expired(raw_token):
                raise TokenExpired()
            raise InvalidAccessToken()

    def get_user(self, validated_token):
        try:
            user = super().get_user(validated_token)
        except AuthenticationFailed:
            raise AuthenticationError("User not found")

        AccessPolicy.ensure_approved(user)
        return user
