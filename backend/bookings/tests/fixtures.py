"""Shared fixtures for bookings tests."""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest
from django.contrib.auth import get_user_model

from bookings.models import Booking
from bookings.pricing import compute_booking_price
from equipment.models import Equipment
from insurance.models import InsurancePolicy

User = get_user_model()


def _create_user(*, username: str, can_list: bool, can_rent: bool, **extra) -> User:
    return User.objects.create_user(
        username=username,
        password="testpass",
        can_list=can_list,
        can_rent=can_rent,
        **extra,
    )


@pytest.fixture
def owner_user():
    return _create_user(username="owner", can_list=True, can_rent=True)


@pytest.fixture
def renter_user():
    return _create_user(username="renter", can_list=False, can_rent=True)


@pytest.fixture
def other_user():
    return _create_user(username="other", can_list=True, can_rent=True)


@pytest.fixture
def staff_user():
    return _create_user(username="support", can_list=False, can_rent=False, is_staff=True)


@pytest.fixture
def equipment(owner_user):
    return Equipment.objects.create(
        owner=owner_user,
        title="Sony A7 IV",
        brand="Sony",
        description="Full-frame mirrorless body.",
        category=Equipment.Category.CAMERA,
        quantity=2,
        price_per_day=450_000,
        replacement_price=95_000_000,
    )


@pytest.fixture
def insurance_policy():
    return InsurancePolicy.objects.create(
        name="Standard cover",
        min_coverage=10_000_000,
        max_coverage=30_000_000,
    )


@pytest.fixture
def booking_factory(equipment, renter_user) -> Callable[..., Booking]:
    """Create a priced booking directly in the requested status."""

    def _create_booking(
        *,
        start_date: date,
        end_date: date,
        status=Booking.Status.CONFIRMED,
        quantity: int = 1,
        renter=None,
        equipment_override: Equipment | None = None,
        **extra_fields,
    ) -> Booking:
        selected = equipment_override or equipment
        price = compute_booking_price(
            price_per_day=selected.price_per_day,
            quantity=quantity,
            start_date=start_date,
            end_date=end_date,
        )
        fields = {
            "base_price": price.base_price,
            "service_fee": price.service_fee,
            "insurance_fee": price.insurance_fee,
            "total_price": price.total_price,
        }
        fields.update(extra_fields)
        return Booking.objects.create(
            equipment=selected,
            owner_id=selected.owner_id,
            renter=renter or renter_user,
            quantity=quantity,
            start_date=start_date,
            end_date=end_date,
            status=status,
            **fields,
        )

    return _create_booking
