"""Business-level exceptions and the API error envelope.

Every error leaving a view is rendered as ``{"message": ...}`` with an HTTP
status from the taxonomy below. Stack traces are logged, never returned.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("storefront.errors")


class StorefrontError(exceptions.APIException):
    """Base class for all business logic errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"

    def __init__(self, message: str | None = None, **payload):
        super().__init__(detail=message or self.default_detail)
        self.message = str(self.detail)
        self.payload = payload


class InvalidInput(StorefrontError):
    """Missing or malformed input."""

    default_detail = "Invalid input."
    default_code = "invalid"


class UnauthenticatedError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authorization token required"
    default_code = "not_authenticated"


class AuthorizationError(StorefrontError):
    """Raised when the caller lacks rights over a resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"
    default_code = "permission_denied"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(StorefrontError):
    """Business-rule violation (insufficient stock, cancelling a shipped order)."""

    default_detail = "Request conflicts with current state."
    default_code = "conflict"


class InfrastructureError(StorefrontError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server error"
    default_code = "server_error"


def _first_message(detail) -> str:
    """Return the first human-readable message nested in a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return InvalidInput.default_detail
    if isinstance(detail, (list, tuple)):
        if not detail:
            return InvalidInput.default_detail
        return _first_message(detail[0])
    return str(detail)


def storefront_exception_handler(exc, context):
    """DRF exception handler producing the `{message, ...}` envelope."""

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()
    elif not isinstance(exc, exceptions.APIException):
        view = context.get("view")
        event = "unhandled_database_error" if isinstance(exc, DatabaseError) else "unhandled_error"
        logger.exception(event, exc_info=exc, extra={"view": type(view).__name__ if view else None})
        exc = InfrastructureError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, StorefrontError):
        body = {"message": exc.message, **exc.payload}
    elif isinstance(exc, exceptions.ValidationError):
        body = {"message": _first_message(exc.detail), "errors": response.data}
    elif isinstance(exc, exceptions.NotAuthenticated):
        body = {"message": UnauthenticatedError.default_detail}
    else:
        body = {"message": _first_message(getattr(exc, "detail", response.data))}
    return Response(body, status=response.status_code, headers=_passthrough_headers(response))


def _passthrough_headers(response) -> dict:
    headers = {}
    for name in ("WWW-Authenticate", "Retry-After"):
        if response.has_header(name):
            headers[name] = response[name]
    return headers
