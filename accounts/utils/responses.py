from rest_framework import status
from rest_framework.response import Response


def envelope(message: str, status_code: int = status.HTTP_200_OK, **data) -> Response:
    """Wrap a successful result in the success/message/data envelope."""
    return Response(
        {"success": True, "message": message, "data": data},
        status=status_code,
    )
