from __future__ import annotations

from typing import Optional

from .models import InsurancePolicy


def get_active_policy(policy_id) -> Optional[InsurancePolicy]:
    """
    Return the policy when it exists and is active.

    Unknown or inactive policies yield None; a booking then carries no
    insurance fee rather than failing.
    """
    if not policy_id:
        return None
    try:
        policy = InsurancePolicy.objects.get(pk=policy_id)
    except (InsurancePolicy.DoesNotExist, TypeError, ValueError):
        return None
    return policy if policy.is_active else None
