from django.http import Http404

from core.exceptions import TokenExpired, ValidationError, api_exception_handler


def test_service_error_renders_message_only():
    response = api_exception_handler(ValidationError("Rating must be between 1 and 5"), {})

    assert response.status_code == 400
    assert response.data == {"message": "Rating must be between 1 and 5"}


def test_token_errors_carry_code():
    response = api_exception_handler(TokenExpired(), {})

    assert response.status_code == 401
    assert response.data == {"message": "Access token expired", "code": "TOKEN_EXPIRED"}


def test_http404_becomes_not_found():
    response = api_exception_handler(Http404(), {})
    assert response.status_code == 404


def test_unexpected_error_is_500_with_raw_message():
    response = api_exception_handler(RuntimeError("database is locked"), {})

    assert response.status_code == 500
    assert response.data == {"message": "database is locked"}
