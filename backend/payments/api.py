"""Payment initiation, status polling and owner payout endpoints."""

from __future__ import annotations

import logging

from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bookings.models import Booking
from core.errors import BookingNotFound, InvalidInput, MissingRequiredField

from .payouts import payouts_for_owner, summarize_payouts
from .serializers import PaymentSerializer, PayoutSerializer
from .services import check_payment, init_payment

logger = logging.getLogger(__name__)

DEFAULT_PAYOUT_LIMIT = 50
MAX_PAYOUT_LIMIT = 200


def _booking_id_from(value):
    if value in (None, ""):
        raise MissingRequiredField("booking_id is required.", field="booking_id")
    return value


def _assert_participant(request, booking_id) -> None:
    """Payments are visible to the booking's renter and owner (and staff)."""
    user = request.user
    try:
        booking = Booking.objects.only("owner_id", "renter_id").get(pk=booking_id)
    except (Booking.DoesNotExist, TypeError, ValueError):
        raise BookingNotFound(booking_id=str(booking_id)) from None
    if user.is_staff or user.id in (booking.owner_id, booking.renter_id):
        return
    raise BookingNotFound(booking_id=str(booking_id))


def _parse_limit(value: str | None) -> int:
    if not value:
        return DEFAULT_PAYOUT_LIMIT
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("limit must be an integer.", field="limit") from None
    if parsed <= 0:
        raise InvalidInput("limit must be greater than zero.", field="limit")
    return min(parsed, MAX_PAYOUT_LIMIT)


def _parse_offset(value: str | None) -> int:
    if not value:
        return 0
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("offset must be an integer.", field="offset") from None
    if parsed < 0:
        raise InvalidInput("offset must be greater than or equal to zero.", field="offset")
    return parsed


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def payment_init(request):
    """Return bank-transfer instructions (amount, memo, QR payload) for a booking."""
    booking_id = _booking_id_from(request.data.get("booking_id"))
    _assert_participant(request, booking_id)
    instructions = init_payment(booking_id)
    return Response(
        {
            "success": True,
            "data": {
                "payment_id": instructions.payment.pk,
                "booking_id": instructions.payment.booking_id,
                "amount": instructions.amount,
                "content": instructions.content,
                "qr_payload": instructions.qr_payload,
                "currency": settings.CURRENCY,
                "poll_interval_seconds": settings.PAYMENT_POLL_INTERVAL_SECONDS,
                "expires_in_seconds": settings.PAYMENT_EXPIRY_MINUTES * 60,
            },
        }
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def payment_check(request):
    """Poll target: report pending, paid or failed for a booking's payment."""
    booking_id = _booking_id_from(request.query_params.get("booking_id"))
    _assert_participant(request, booking_id)
    result = check_payment(booking_id)
    data = {
        "status": result.status,
        "payment": PaymentSerializer(result.payment).data,
        "poll_interval_seconds": settings.PAYMENT_POLL_INTERVAL_SECONDS,
    }
    if result.txn_id:
        data["txn_id"] = result.txn_id
    return Response({"success": True, "data": data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def owner_payouts(request):
    """Return the owner's payouts with summary stats."""
    qs = payouts_for_owner(request.user)
    status_param = request.query_params.get("status")
    if status_param:
        qs = qs.filter(status=status_param)

    limit = _parse_limit(request.query_params.get("limit"))
    offset = _parse_offset(request.query_params.get("offset"))

    stats = summarize_payouts(payouts_for_owner(request.user))
    total_count = qs.count()
    results = PayoutSerializer(qs[offset : offset + limit], many=True).data

    next_offset = offset + limit
    if next_offset >= total_count:
        next_offset = None

    return Response(
        {
            "success": True,
            "data": {
                "results": results,
                "count": total_count,
                "next_offset": next_offset,
                "stats": stats,
            },
        }
    )
