"""HTTP client for the external bank-transfer payment gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests
from django.conf import settings

from core.errors import GatewayUnavailable

logger = logging.getLogger(__name__)

REFERENCE_EXISTS_MARKER = "already exists"


class ReferenceAlreadyExists(Exception):
    """The gateway already holds a payment for this reference."""


@dataclass(frozen=True)
class GatewayRecord:
    amount: int
    content: str
    status: str
    txn_id: str = ""

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"


class BankTransferGateway:
    """
    Thin wrapper around the gateway's ``/search`` and ``/init`` endpoints.

    Responses use a ``{"success", "data", "count"}`` envelope; the first
    record in ``data`` is authoritative for a reference.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "x-api-key": self.api_key}

    def search(self, ref: str) -> Optional[GatewayRecord]:
        try:
            response = requests.get(
                f"{self.base_url}/search",
                params={"ref": ref},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("gateway search failed for ref %s: %s", ref, exc)
            raise GatewayUnavailable(ref=ref) from exc
        except ValueError as exc:
            raise GatewayUnavailable("Gateway returned an unreadable response.", ref=ref) from exc

        if not isinstance(payload, dict) or not payload.get("success"):
            return None
        records = payload.get("data") or []
        if not payload.get("count") or not records:
            return None
        return _record_from_payload(records[0], ref)

    def create(self, *, amount: int, ref: str) -> None:
        try:
            response = requests.post(
                f"{self.base_url}/init",
                json={"amount": int(amount), "ref": ref},
                headers={**self._headers(), "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("gateway init failed for ref %s: %s", ref, exc)
            raise GatewayUnavailable(ref=ref) from exc

        if response.status_code == 400 and REFERENCE_EXISTS_MARKER in response.text.lower():
            raise ReferenceAlreadyExists(ref)
        if not response.ok:
            logger.warning(
                "gateway init rejected ref %s: %s %s",
                ref,
                response.status_code,
                response.text[:200],
            )
            raise GatewayUnavailable(ref=ref, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if isinstance(payload, dict) and payload.get("success") is False:
            raise GatewayUnavailable(
                str(payload.get("error") or "Payment initialization failed."),
                ref=ref,
            )


def _record_from_payload(data: Any, ref: str) -> GatewayRecord:
    if not isinstance(data, dict):
        raise GatewayUnavailable("Gateway returned a malformed record.", ref=ref)
    try:
        amount = int(data["amount"])
        content = str(data["content"])
    except (KeyError, TypeError, ValueError) as exc:
        raise GatewayUnavailable("Gateway returned a malformed record.", ref=ref) from exc
    txn_id = data.get("txnId")
    return GatewayRecord(
        amount=amount,
        content=content,
        status=str(data.get("status") or "pending"),
        txn_id="" if txn_id is None else str(txn_id),
    )


def get_gateway() -> BankTransferGateway:
    return BankTransferGateway(
        base_url=settings.PAYMENT_GATEWAY_BASE_URL,
        api_key=settings.PAYMENT_GATEWAY_API_KEY,
        timeout=float(settings.PAYMENT_GATEWAY_TIMEOUT),
    )
