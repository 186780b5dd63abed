from unittest import mock

import pytest
import requests

from core.errors import GatewayUnavailable
from payments.gateway import BankTransferGateway, ReferenceAlreadyExists, get_gateway


def _response(status_code=200, payload=None, text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    response.json.return_value = payload
    if response.ok:
        response.raise_for_status.return_value = None
    else:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


@pytest.fixture
def gateway():
    return BankTransferGateway("https://gateway.test/", "secret-key", timeout=2)


@mock.patch("payments.gateway.requests.get")
def test_search_returns_first_record(mock_get, gateway):
    mock_get.return_value = _response(
        payload={
            "success": True,
            "count": 1,
            "data": [{"amount": 1417500, "content": "GS12", "status": "paid", "txnId": 998}],
        }
    )

    record = gateway.search("12")

    assert record.amount == 1_417_500
    assert record.content == "GS12"
    assert record.is_paid
    assert record.txn_id == "998"
    mock_get.assert_called_once_with(
        "https://gateway.test/search",
        params={"ref": "12"},
        headers={"Accept": "application/json", "x-api-key": "secret-key"},
        timeout=2,
    )


@mock.patch("payments.gateway.requests.get")
def test_search_without_match_returns_none(mock_get, gateway):
    mock_get.return_value = _response(payload={"success": True, "count": 0, "data": []})

    assert gateway.search("12") is None


@mock.patch("payments.gateway.requests.get")
def test_search_transport_error_is_gateway_unavailable(mock_get, gateway):
    mock_get.side_effect = requests.ConnectionError("boom")

    with pytest.raises(GatewayUnavailable):
        gateway.search("12")


@mock.patch("payments.gateway.requests.get")
def test_search_http_error_is_gateway_unavailable(mock_get, gateway):
    mock_get.return_value = _response(status_code=503, payload=None)

    with pytest.raises(GatewayUnavailable):
        gateway.search("12")


@mock.patch("payments.gateway.requests.post")
def test_create_posts_amount_and_ref(mock_post, gateway):
    mock_post.return_value = _response(payload={"success": True})

    gateway.create(amount=1_417_500, ref="12")

    _, kwargs = mock_post.call_args
    assert mock_post.call_args.args[0] == "https://gateway.test/init"
    assert kwargs["json"] == {"amount": 1_417_500, "ref": "12"}
    assert kwargs["headers"]["x-api-key"] == "secret-key"


@mock.patch("payments.gateway.requests.post")
def test_create_duplicate_reference(mock_post, gateway):
    mock_post.return_value = _response(
        status_code=400, text='{"error":"Reference code already exists"}'
    )

    with pytest.raises(ReferenceAlreadyExists):
        gateway.create(amount=100, ref="12")


@mock.patch("payments.gateway.requests.post")
def test_create_other_failure_is_gateway_unavailable(mock_post, gateway):
    mock_post.return_value = _response(status_code=500, text="internal error")

    with pytest.raises(GatewayUnavailable):
        gateway.create(amount=100, ref="12")


@mock.patch("payments.gateway.requests.post")
def test_create_unsuccessful_envelope(mock_post, gateway):
    mock_post.return_value = _response(payload={"success": False, "error": "Invalid amount"})

    with pytest.raises(GatewayUnavailable):
        gateway.create(amount=100, ref="12")


def test_get_gateway_reads_settings(settings):
    settings.PAYMENT_GATEWAY_BASE_URL = "https://pay.example.com"
    settings.PAYMENT_GATEWAY_API_KEY = "abc"
    settings.PAYMENT_GATEWAY_TIMEOUT = 4

    gateway = get_gateway()

    assert gateway.base_url == "https://pay.example.com"
    assert gateway.api_key == "abc"
    assert gateway.timeout == 4.0
