"""
Booking price and post-rental charge calculations.

All amounts are integers in minor currency units. Each named rounding step
rounds half up on its own; nothing is deferred to the end.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from django.conf import settings
from django.utils.dateparse import parse_date, parse_datetime

from core.errors import InvalidDateRange, InvalidInput

SEVERITY_NONE = "none"
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class BookingPrice:
    total_days: int
    base_price: int
    service_fee: int
    insurance_fee: int
    total_price: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ExtraCharges:
    damage_charge: int
    late_charge: int
    late_minutes: int

    @property
    def total(self) -> int:
        return self.damage_charge + self.late_charge

    def as_dict(self) -> dict[str, int]:
        return {
            "damage": self.damage_charge,
            "late": self.late_charge,
            "late_minutes": self.late_minutes,
            "total": self.total,
        }


def round_half_up(value: Decimal | int) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_booking_date(value: Any, field_name: str) -> date:
    """Accept a date, datetime or ISO string; anything else is an invalid range."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            parsed = parse_date(raw)
            if parsed is None:
                parsed_dt = parse_datetime(raw)
                parsed = parsed_dt.date() if parsed_dt else None
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise InvalidDateRange(f"{field_name} is not a valid date.", field=field_name)


def total_rental_days(start_date: date, end_date: date) -> int:
    if end_date < start_date:
        raise InvalidDateRange()
    return max(1, (end_date - start_date).days + 1)


def _policy_is_active(policy: Any) -> bool:
    status = getattr(policy, "status", None)
    return status in (None, "active")


def compute_insurance_fee(policy: Any, total_days: int) -> int:
    if policy is None or not _policy_is_active(policy):
        return 0
    average_coverage = (Decimal(policy.min_coverage) + Decimal(policy.max_coverage)) / 2
    fee = round_half_up(average_coverage * settings.INSURANCE_FEE_RATE * total_days)
    return max(int(settings.INSURANCE_MIN_FEE), fee)


def compute_booking_price(
    *,
    price_per_day: int,
    quantity: int,
    start_date: Any,
    end_date: Any,
    insurance_policy: Optional[Any] = None,
) -> BookingPrice:
    """
    Price a rental request.

    - total_days: inclusive day count, at least 1
    - base_price: total_days * price_per_day * max(1, quantity)
    - service_fee: BOOKING_SERVICE_FEE_RATE of base_price
    - insurance_fee: derived from the policy's average coverage, floored at
      INSURANCE_MIN_FEE, or 0 without an active policy
    """
    start = parse_booking_date(start_date, "start_date")
    end = parse_booking_date(end_date, "end_date")
    total_days = total_rental_days(start, end)

    base_price = total_days * int(price_per_day) * max(1, int(quantity or 1))
    service_fee = round_half_up(base_price * settings.BOOKING_SERVICE_FEE_RATE)
    insurance_fee = compute_insurance_fee(insurance_policy, total_days)

    return BookingPrice(
        total_days=total_days,
        base_price=base_price,
        service_fee=service_fee,
        insurance_fee=insurance_fee,
        total_price=base_price + service_fee + insurance_fee,
    )


def effective_late_minutes(
    provided_minutes: Optional[int],
    scheduled_end: Optional[datetime],
    now: datetime,
) -> int:
    """A client-supplied value never lowers the wall-clock lateness."""
    provided = max(int(provided_minutes or 0), 0)
    if scheduled_end is None:
        return provided
    elapsed = math.ceil((now - scheduled_end).total_seconds() / 60)
    return max(provided, elapsed, 0)


def compute_extra_charges(
    *,
    replacement_price: int,
    price_per_day: int,
    quantity: int,
    severity: str,
    late_minutes: int,
) -> ExtraCharges:
    multipliers = settings.DAMAGE_SEVERITY_MULTIPLIERS
    severity = severity or SEVERITY_NONE
    if severity not in multipliers:
        raise InvalidInput(f"Unknown damage severity '{severity}'.", field="severity")

    damage_charge = round_half_up(
        Decimal(replacement_price) * multipliers[severity] * max(1, int(quantity or 1))
    )

    late_minutes = max(int(late_minutes or 0), 0)
    late_charge = 0
    if late_minutes > 0:
        late_hours = math.ceil(late_minutes / 60)
        hourly_rate = Decimal(price_per_day) / HOURS_PER_DAY
        late_charge = round_half_up(late_hours * hourly_rate)

    return ExtraCharges(
        damage_charge=damage_charge,
        late_charge=late_charge,
        late_minutes=late_minutes,
    )
