# utils/paystack.py
"""Thin client for the Paystack transaction API.

``initialize_transaction`` stands in for opening the hosted checkout: it
returns the ``authorization_url`` the pilgrim is sent to and the reference
the success callback will carry. ``verify_transaction`` asks Paystack what
was actually captured for a reference. Amounts are in kobo.
"""
import logging

import requests

import config
from utils import errors

logger = logging.getLogger(__name__)


class PaystackClient:
    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co", timeout: float = 10):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> dict:
        if not self.secret_key:
            raise errors.PaymentInfrastructureError("Payment gateway is not configured")
        try:
            resp = requests.request(method, f"{self.base_url}{path}", headers=self._headers(),
                                    timeout=self.timeout, **kwargs)
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Paystack %s %s failed: %s", method, path, exc)
            raise errors.PaymentInfrastructureError() from exc

        if resp.status_code >= 400 or not body.get("status"):
            logger.error("Paystack %s %s rejected (%s): %s", method, path, resp.status_code, body.get("message"))
            raise errors.PaymentInfrastructureError(body.get("message") or "Payment gateway rejected the request")
        return body.get("data") or {}

    def initialize_transaction(self, email: str, amount: int, reference: str, metadata: dict = None,
                               currency: str = "NGN", callback_url: str = None) -> dict:
        payload = {
            "email": email,
            "amount": amount,
            "currency": currency,
            "reference": reference,
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url
        return self._request("POST", "/transaction/initialize", json=payload)

    def verify_transaction(self, reference: str) -> dict:
        return self._request("GET", f"/transaction/verify/{reference}")


def get_gateway() -> PaystackClient:
    return PaystackClient(config.PAYSTACK_SECRET_KEY, config.PAYSTACK_BASE_URL, config.HTTP_TIMEOUT)
