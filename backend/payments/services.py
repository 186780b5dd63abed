"""Payment initiation and reconciliation against the bank-transfer gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from bookings.models import Booking
from bookings.services import activate_after_payment
from core.errors import (
    BookingNotFound,
    GatewayUnavailable,
    InvalidState,
    PaymentAlreadyCompleted,
    PaymentNotFound,
)

from .gateway import BankTransferGateway, GatewayRecord, ReferenceAlreadyExists, get_gateway
from .models import Payment

logger = logging.getLogger(__name__)

SETTLED_STATUSES = (Payment.Status.PAID, Payment.Status.COMPLETED)


@dataclass
class PaymentInstructions:
    payment: Payment
    amount: int
    content: str
    qr_payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class PaymentCheck:
    status: str
    payment: Payment
    txn_id: str = ""


def payment_reference(booking: Booking) -> str:
    return str(booking.pk)


def live_payment_for_booking(booking_id) -> Optional[Payment]:
    """The booking's current payment: a settled one first, else the newest non-failed one."""
    payments = Payment.objects.filter(booking_id=booking_id)
    settled = payments.filter(status__in=SETTLED_STATUSES).order_by("-created_at").first()
    if settled is not None:
        return settled
    return payments.exclude(status=Payment.Status.FAILED).order_by("-created_at").first()


def _get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.get(pk=booking_id)
    except (Booking.DoesNotExist, TypeError, ValueError):
        raise BookingNotFound(booking_id=str(booking_id)) from None


def _obtain_gateway_record(gateway: BankTransferGateway, booking: Booking) -> GatewayRecord:
    ref = payment_reference(booking)
    record = gateway.search(ref)
    if record is not None:
        return record

    try:
        gateway.create(amount=booking.total_price, ref=ref)
    except ReferenceAlreadyExists:
        # Another caller created it between our search and init.
        logger.warning("gateway reference %s already exists; re-reading", ref)

    record = gateway.search(ref)
    if record is None:
        raise GatewayUnavailable("Payment record not found after init.", ref=ref)
    return record


def _upsert_pending_payment(booking: Booking, record: GatewayRecord) -> Payment:
    ref = payment_reference(booking)
    fields = {"content": record.content, "status": Payment.Status.PENDING}
    try:
        with transaction.atomic():
            payment = (
                Payment.objects.select_for_update()
                .filter(booking=booking)
                .exclude(status=Payment.Status.FAILED)
                .first()
            )
            if payment is None:
                return Payment.objects.create(
                    booking=booking,
                    renter_id=booking.renter_id,
                    owner_id=booking.owner_id,
                    ref=ref,
                    method=Payment.Method.BANK_TRANSFER,
                    amount=record.amount,
                    **fields,
                )
            if payment.is_settled():
                raise PaymentAlreadyCompleted(booking_id=str(booking.pk))
            if payment.amount != record.amount:
                # Amount is fixed at creation.
                logger.warning(
                    "payment %s amount %s differs from gateway amount %s",
                    payment.pk,
                    payment.amount,
                    record.amount,
                    extra={"booking_id": booking.pk},
                )
            for name, value in fields.items():
                setattr(payment, name, value)
            payment.save(update_fields=[*fields, "updated_at"])
            return payment
    except IntegrityError:
        # Lost the insert race; the winner's row carries the same gateway record.
        payment = (
            Payment.objects.filter(booking=booking)
            .exclude(status=Payment.Status.FAILED)
            .first()
        )
        if payment is None:
            raise
        return payment


def init_payment(booking_id, *, gateway: Optional[BankTransferGateway] = None) -> PaymentInstructions:
    """
    Obtain the bank-transfer instructions for a booking.

    The gateway's amount and content are used verbatim. Calling this again
    for the same booking returns the same instructions.
    """
    booking = _get_booking(booking_id)

    existing = live_payment_for_booking(booking.pk)
    if existing is not None and existing.is_settled():
        raise PaymentAlreadyCompleted(booking_id=str(booking.pk))
    if booking.is_terminal():
        raise InvalidState("Booking is closed for payment.", status=booking.status)

    gateway = gateway or get_gateway()
    record = _obtain_gateway_record(gateway, booking)
    if record.amount != booking.total_price:
        logger.warning(
            "gateway amount %s differs from booking %s total %s; using gateway amount",
            record.amount,
            booking.pk,
            booking.total_price,
            extra={"booking_id": booking.pk},
        )

    payment = _upsert_pending_payment(booking, record)
    logger.info(
        "payment %s pending for booking %s",
        payment.pk,
        booking.pk,
        extra={"booking_id": booking.pk},
    )
    return PaymentInstructions(
        payment=payment,
        amount=record.amount,
        content=record.content,
        qr_payload={
            "bank": settings.PAYMENT_QR_BANK,
            "account_number": settings.PAYMENT_QR_ACCOUNT_NUMBER,
            "amount": record.amount,
            "content": record.content,
        },
    )


def check_payment(booking_id, *, gateway: Optional[BankTransferGateway] = None) -> PaymentCheck:
    """
    Poll the gateway for a booking's payment.

    A locally settled payment answers without an external call. When the
    gateway reports the transfer, the payment is marked paid and the booking
    moves to ongoing.
    """
    payment = live_payment_for_booking(booking_id)
    if payment is None:
        payment = (
            Payment.objects.filter(booking_id=booking_id).order_by("-created_at").first()
        )
        if payment is None:
            raise PaymentNotFound(booking_id=str(booking_id))

    if payment.is_settled():
        return PaymentCheck(status=Payment.Status.PAID, payment=payment, txn_id=payment.external_txn_id)
    if payment.status == Payment.Status.FAILED:
        return PaymentCheck(status=Payment.Status.FAILED, payment=payment)

    gateway = gateway or get_gateway()
    record = gateway.search(payment.ref)
    if record is None or not record.is_paid:
        return PaymentCheck(status=Payment.Status.PENDING, payment=payment)

    paid_at = timezone.now()
    with transaction.atomic():
        updated = Payment.objects.filter(pk=payment.pk, status=Payment.Status.PENDING).update(
            status=Payment.Status.PAID,
            external_txn_id=record.txn_id,
            paid_at=paid_at,
            updated_at=paid_at,
        )
        if updated:
            activate_after_payment(payment.booking_id)
    payment.refresh_from_db()

    if payment.status == Payment.Status.FAILED:
        logger.warning(
            "gateway reports booking %s paid after the local payment expired; reconcile manually",
            payment.booking_id,
            extra={"booking_id": payment.booking_id},
        )
        return PaymentCheck(status=Payment.Status.FAILED, payment=payment, txn_id=record.txn_id)

    if updated:
        logger.info(
            "payment %s confirmed (txn %s)",
            payment.pk,
            record.txn_id,
            extra={"booking_id": payment.booking_id},
        )
    return PaymentCheck(status=Payment.Status.PAID, payment=payment, txn_id=payment.external_txn_id)
