import logging

from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class BankError(APIException):
    """Base class for errors rendered in the response envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Something went wrong"
    default_code = "error"


class Unauthorized(BankError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


class ValidationFailed(BankError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid request"
    default_code = "invalid"


class NotFound(BankError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "not_found"


class Conflict(BankError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Conflict"
    default_code = "conflict"


class InternalError(BankError):
    pass


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def _envelope(message, status_code, data=None):
    return Response(
        {"success": False, "message": message, "data": data},
        status=status_code,
    )


def envelope_exception_handler(exc, context):
    """
    Render every error raised by an API view as a failure envelope.

    Serializer errors become 422 with the first field message, missing or
    bad credentials become 401, and anything that is not an APIException
    is logged and reported as a generic 500.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view else "unknown"

    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        return _envelope(Unauthorized.default_detail, status.HTTP_401_UNAUTHORIZED)

    if isinstance(exc, ValidationError):
        logger.info("Validation failed in %s: %s", view_name, exc.detail)
        return _envelope(
            _first_message(exc.detail),
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.detail},
        )

    if isinstance(exc, BankError):
        set_rollback()
        if exc.status_code >= 500:
            logger.error("Internal error in %s: %s", view_name, exc.detail)
        return _envelope(str(exc.detail), exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return _envelope(_first_message(response.data), response.status_code)

    logger.exception("Unhandled error in %s: %s", view_name, exc)
    set_rollback()
    return _envelope(
        InternalError.default_detail, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
