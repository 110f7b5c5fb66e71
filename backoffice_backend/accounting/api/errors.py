# accounting/api/errors.py

"""
Service error -> HTTP response mapping shared by every back-office API.

Body shape: {"detail": "<message>", "code": "<stable machine code>"}
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    AlreadyReversedError,
    ConflictError,
    NotFoundError,
    ReferencedError,
)


def status_for(exc: AccountingServiceError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (AlreadyReversedError, ReferencedError, ConflictError)):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def service_error_response(exc: AccountingServiceError) -> Response:
    return Response({"detail": str(exc), "code": exc.code}, status=status_for(exc))


def forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


class BadQueryParam(ValueError):
    pass


def date_param(request, name: str):
    """Optional YYYY-MM-DD query parameter."""
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise BadQueryParam(f"Invalid {name}. Use YYYY-MM-DD.")
    return value


def bad_param_response(exc: BadQueryParam) -> Response:
    return Response({"detail": str(exc), "code": "validation_error"}, status=status.HTTP_400_BAD_REQUEST)
