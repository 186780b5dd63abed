"""Error taxonomy shared by the booking, incident and payment services."""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class EngineError(Exception):
    """Base class for failures surfaced to API callers."""

    code = "engine_error"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "The request could not be processed."

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "code": self.code,
            "detail": self.message,
        }
        if self.context:
            payload["context"] = self.context
        return payload


class InvalidInput(EngineError):
    code = "validation_error"
    default_message = "Invalid input."


class MissingRequiredField(InvalidInput):
    code = "missing_required_field"
    default_message = "A required field is missing."


class InvalidDateRange(InvalidInput):
    code = "invalid_date_range"
    default_message = "End date must be on or after start date."


class NotFound(EngineError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class BookingNotFound(NotFound):
    code = "booking_not_found"
    default_message = "Booking not found."


class EquipmentNotFound(NotFound):
    code = "equipment_not_found"
    default_message = "Equipment not found."


class IncidentNotFound(NotFound):
    code = "incident_not_found"
    default_message = "Incident not found."


class PaymentNotFound(NotFound):
    code = "payment_not_found"
    default_message = "Payment not found."


class InvalidState(EngineError):
    code = "invalid_state"
    default_message = "This transition is not allowed from the current state."


class TooEarly(InvalidState):
    code = "too_early"
    default_message = "Cannot complete booking before end date."


class PaymentAlreadyCompleted(InvalidState):
    code = "payment_already_completed"
    default_message = "Payment already completed for this booking."


class ConcurrentModification(InvalidState):
    code = "concurrent_modification"
    http_status = status.HTTP_409_CONFLICT
    default_message = "The booking was modified concurrently; reload and retry."


class GatewayUnavailable(EngineError):
    code = "gateway_unavailable"
    http_status = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment gateway is temporarily unavailable."


class PersistenceError(EngineError):
    code = "persistence_error"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage failure."


def error_response(exc: EngineError) -> Response:
    return Response(exc.as_payload(), status=exc.http_status)


def engine_exception_handler(exc, context):
    """
    DRF exception handler translating engine errors into status codes.

    Storage failures are reported as PersistenceError; their detail is only
    exposed when DEBUG is on.
    """
    if isinstance(exc, EngineError):
        return error_response(exc)
    if isinstance(exc, DatabaseError):
        logger.exception("persistence failure while handling %s", context.get("view"))
        detail = str(exc) if settings.DEBUG else None
        return error_response(PersistenceError(detail))
    return exception_handler(exc, context)
