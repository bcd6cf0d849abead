from rest_framework import status
from rest_framework.response import Response


def standardize_response(success: bool, message: str, data=None, status_code=None):
    """
    Standardize API response format
    """
    response_data = {"success": success, "message": message}

    if data is not None:
        if isinstance(data, dict):
            response_data.update(data)
        else:
            response_data["data"] = data

    if status_code is None:
        status_code = status.HTTP_200_OK if success else status.HTTP_400_BAD_REQUEST

    return Response(response_data, status=status_code)
