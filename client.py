"""HTTP client for the logistics engine.

The base URL is fixed when the client is built. To talk to another server,
build another client (``with_base_url``) instead of mutating this one.
"""
import time
from urllib.parse import quote

import requests

from errors import DispatchDeniedError, LogisticsError, NotFoundError

DEFAULT_BASE_URL = "http://localhost:6769"
DEFAULT_TIMEOUT = 10
PAYMENT_STATUSES = ("success", "failed", "pending")


class LogisticsClient:
    def __init__(self, base_url=DEFAULT_BASE_URL, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def with_base_url(self, base_url):
        return LogisticsClient(base_url, timeout=self.timeout)

    def _request(self, method, path, payload=None):
        try:
            response = self.session.request(
                method, f"{self.base_url}{path}", json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise LogisticsError(f"Cannot reach {self.base_url}: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or f"HTTP {response.status_code}"
            if response.status_code == 404:
                raise NotFoundError(message)
            if response.status_code == 403 and message == "dispatch_denied":
                raise DispatchDeniedError(body.get("reason") or "Dispatch denied: Package must be payment_verified")
            if body.get("reason"):
                message = f"{message}: {body['reason']}"
            raise LogisticsError(message, status_code=response.status_code)
        return body

    # POST /orders/ingest (Store -> Us)
    def create_order(self, external_order_id, merchant_id, recipient_details):
        return self._request("POST", "/orders/ingest", {
            "external_order_id": external_order_id,
            "merchant_id": merchant_id,
            "recipient_details": recipient_details,
        })

    # POST /webhooks/payment (Payment Gateway -> Us)
    def simulate_payment(self, external_order_id, payment_status="success", payment_transaction_id=None):
        if payment_status not in PAYMENT_STATUSES:
            raise ValueError(f"payment_status must be one of {', '.join(PAYMENT_STATUSES)}")
        if payment_transaction_id is None:
            payment_transaction_id = f"PAY-{int(time.time() * 1000)}"
        return self._request("POST", "/webhooks/payment", {
            "external_order_id": external_order_id,
            "payment_transaction_id": payment_transaction_id,
            "payment_status": payment_status,
        })

    # GET /partners/status/:id (Store -> Us)
    def get_package_status(self, external_order_id):
        return self._request("GET", f"/partners/status/{quote(external_order_id, safe='')}")

    # POST /dispatch (Driver App -> Us)
    def dispatch_package(self, tracking_number, driver_id="DRIVER-001"):
        return self._request("POST", "/dispatch", {
            "tracking_number": tracking_number,
            "driver_id": driver_id,
        })

    # POST /notify (Internal System -> Store)
    def notify_store(self, external_order_id, status):
        return self._request("POST", "/notify", {
            "external_order_id": external_order_id,
            "status": status,
        })

    # GET /orders (Dashboard poll)
    def get_all_orders(self):
        return self._request("GET", "/orders")

    def check_connection(self):
        """True when the server answers; an unknown order id still proves it is up."""
        try:
            self.get_package_status("TEST-CONNECTION")
        except NotFoundError:
            return True
        except LogisticsError:
            return False
        return True
