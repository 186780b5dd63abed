"""Fixtures for payment tests: an in-memory gateway and payment rows."""

from __future__ import annotations

from datetime import timedelta
from typing import Callable, Optional

import pytest
from django.utils import timezone

from payments.gateway import GatewayRecord, ReferenceAlreadyExists
from payments.models import Payment


class FakeGateway:
    """Stands in for BankTransferGateway; records every call."""

    def __init__(self) -> None:
        self.records: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.on_create: Optional[Callable[[str, int], None]] = None

    def search(self, ref: str) -> Optional[GatewayRecord]:
        self.calls.append(("search", ref))
        data = self.records.get(ref)
        if data is None:
            return None
        return GatewayRecord(**data)

    def create(self, *, amount: int, ref: str) -> None:
        self.calls.append(("create", ref))
        if self.on_create is not None:
            self.on_create(ref, amount)
        if ref in self.records:
            raise ReferenceAlreadyExists(ref)
        self.records[ref] = {
            "amount": amount,
            "content": f"GS{ref}",
            "status": "pending",
            "txn_id": "",
        }

    def mark_paid(self, ref: str, txn_id: str = "TXN-1") -> None:
        self.records[ref].update(status="paid", txn_id=txn_id)

    def count(self, kind: str) -> int:
        return sum(1 for name, _ in self.calls if name == kind)


@pytest.fixture
def fake_gateway(monkeypatch) -> FakeGateway:
    gateway = FakeGateway()
    monkeypatch.setattr("payments.services.get_gateway", lambda: gateway)
    return gateway


@pytest.fixture
def payment_factory() -> Callable[..., Payment]:
    def _create_payment(booking, *, status=Payment.Status.PENDING, age_minutes: int = 0, **extra):
        payment = Payment.objects.create(
            booking=booking,
            renter_id=booking.renter_id,
            owner_id=booking.owner_id,
            amount=extra.pop("amount", booking.total_price),
            content=extra.pop("content", f"GS{booking.pk}"),
            ref=str(booking.pk),
            status=status,
            **extra,
        )
        if age_minutes:
            # created_at is auto_now_add; backdate through update().
            Payment.objects.filter(pk=payment.pk).update(
                created_at=timezone.now() - timedelta(minutes=age_minutes)
            )
            payment.refresh_from_db()
        return payment

    return _create_payment
