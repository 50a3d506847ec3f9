import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BadRequestError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Geçersiz istek."
    default_code = "bad_request"


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Kimlik doğrulaması başarısız."
    default_code = "unauthorized"


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Bu işlem için yetkiniz yok."
    default_code = "forbidden"


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Kayıt bulunamadı."
    default_code = "not_found"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Kayıt çakışması."
    default_code = "conflict"


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def _flatten_errors(detail):
    """Turn DRF's nested error detail into a flat field -> message map"""
    errors = {}
    for field, value in detail.items():
        errors[field] = _first_message(value)
    return errors


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError) and isinstance(exc.detail, dict):
        errors = _flatten_errors(exc.detail)
        message = errors.get("non_field_errors") or "Girdi verileri geçersiz."
        response.data = {"success": False, "message": message, "errors": errors}
    else:
        detail = response.data
        if isinstance(detail, dict) and "detail" in detail:
            detail = detail["detail"]
        response.data = {"success": False, "message": _first_message(detail)}

    if response.status_code >= 500:
        logger.error(f"API error in {context.get('view').__class__.__name__}: {exc}")
    return response
