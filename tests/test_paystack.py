import pytest
import requests

from utils import errors
from utils.paystack import PaystackClient


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body


def respond_with(monkeypatch, body, status_code=200):
    calls = []

    def fake_request(method, url, headers=None, timeout=None, **kwargs):
        calls.append({"method": method, "url": url, "headers": headers, **kwargs})
        return FakeResponse(status_code, body)

    monkeypatch.setattr(requests, "request", fake_request)
    return calls


def test_initialize_transaction(monkeypatch):
    calls = respond_with(monkeypatch, {"status": True, "data": {
        "reference": "MUT-1", "authorization_url": "https://checkout.paystack.com/abc", "access_code": "abc"}})
    client = PaystackClient("sk_test_123")

    data = client.initialize_transaction("aisha@example.com", 10_000_000, "MUT-1", {"package_id": "p1"},
                                         callback_url="https://app.example/payments/callback")

    assert data["authorization_url"] == "https://checkout.paystack.com/abc"
    call = calls[0]
    assert (call["method"], call["url"]) == ("POST", "https://api.paystack.co/transaction/initialize")
    assert call["headers"]["Authorization"] == "Bearer sk_test_123"
    assert call["json"]["amount"] == 10_000_000
    assert call["json"]["currency"] == "NGN"
    assert call["json"]["callback_url"] == "https://app.example/payments/callback"


def test_verify_transaction(monkeypatch):
    calls = respond_with(monkeypatch, {"status": True, "data": {"status": "success", "amount": 500}})

    data = PaystackClient("sk_test_123").verify_transaction("MUT-1")

    assert data == {"status": "success", "amount": 500}
    assert calls[0]["url"].endswith("/transaction/verify/MUT-1")


def test_rejected_request_raises(monkeypatch):
    respond_with(monkeypatch, {"status": False, "message": "Invalid key"}, status_code=401)

    with pytest.raises(errors.PaymentInfrastructureError) as exc_info:
        PaystackClient("sk_bad").verify_transaction("MUT-1")
    assert exc_info.value.detail == "Invalid key"


def test_network_error_raises(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(requests, "request", boom)

    with pytest.raises(errors.PaymentInfrastructureError):
        PaystackClient("sk_test_123").verify_transaction("MUT-1")


def test_missing_secret_key_raises(monkeypatch):
    calls = respond_with(monkeypatch, {"status": True, "data": {}})

    with pytest.raises(errors.PaymentInfrastructureError):
        PaystackClient("").initialize_transaction("a@b.com", 100, "MUT-1")
    assert calls == []
