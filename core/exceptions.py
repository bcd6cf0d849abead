import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ServiceError(exceptions.APIException):
    """Base class for errors raised by the service layer"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed"
    error_code = None

    def __init__(self, message=None, error_code=None):
        super().__init__(detail=message or self.default_detail)
        if error_code:
            self.error_code = error_code

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request data"


class ConflictError(ServiceError):
    """Duplicate resource or illegal state transition"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request conflicts with the current state of the resource"


class AuthenticationError(exceptions.AuthenticationFailed):
    default_detail = "Not authorized"
    error_code = None

    def __init__(self, message=None, error_code=None):
        super().__init__(detail=message or self.default_detail)
        if error_code:
            self.error_code = error_code


class TokenExpired(AuthenticationError):
    default_detail = "Access token expired"
    error_code = "TOKEN_EXPIRED"


class InvalidAccessToken(AuthenticationError):
    default_detail = "Invalid access token"
    error_code = "INVALID_TOKEN"


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class AccountNotApproved(AuthorizationError):
    default_detail = "Account not approved. Please wait for admin approval."


class DoctorProfileNotFound(AuthorizationError):
    default_detail = "Doctor profile not found"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class UnhandledError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


def _first_message(detail) -> str:
    """Collapse DRF error details (dict/list/str) into a single message"""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_message(value)
            if field in ("detail", "non_field_errors"):
                return message
            return f"{field}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF exception handler rendering every error as {"message": str}
    (plus "code" for token errors)
    """
    # rest_framework.views loads the authentication classes, which import this module
    from rest_framework.views import set_rollback

    if isinstance(exc, Http404):
        exc = NotFoundError()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = AuthorizationError()
    elif not isinstance(exc, exceptions.APIException):
        view = context.get("view")
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {str(exc)}"
        )
        exc = UnhandledError(str(exc) or None)

    headers = {}
    if getattr(exc, "auth_header", None):
        headers["WWW-Authenticate"] = exc.auth_header
    if getattr(exc, "wait", None):
        headers["Retry-After"] = "%d" % exc.wait

    payload = {"message": _first_message(exc.detail)}
    error_code = getattr(exc, "error_code", None)
    if error_code:
        payload["code"] = error_code

    if exc.status_code >= 500:
        logger.error(f"Server error: {payload['message']}")
    set_rollback()
    return Response(payload, status=exc.status_code, headers=headers)
