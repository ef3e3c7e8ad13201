import functools
import logging

from rest_framework.exceptions import APIException
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def error_response(code: str, message: str, status: int, details=None) -> Response:
    body = {"success": False, "error": {"code": code, "message": message}}
    if details:
        body["error"]["details"] = details
    return Response(body, status=status)


def validation_error(details) -> Response:
    return error_response("VALIDATION_ERROR", "Invalid request", 422, details=details)


def not_found(message: str = "Record not found") -> Response:
    return error_response("NOT_FOUND", message, 404)


def structured_errors(view):
    """
    Keep exceptions from crossing the API boundary: DRF errors (bad JSON,
    unsupported media type) keep their status, anything else becomes a 500.
    """
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except APIException as e:
            return error_response(str(e.default_code).upper(), str(e.detail), e.status_code)
        except Exception:
            logger.exception("unhandled error in %s", view.__name__)
            return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)

    return wrapper
