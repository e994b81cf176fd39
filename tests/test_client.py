import pytest
import requests

from client import LogisticsClient
from errors import DispatchDeniedError, LogisticsError, NotFoundError

BASE_URL = "http://engine.test"


@pytest.fixture
def api(flask_session):
    return LogisticsClient(BASE_URL, timeout=3, session=flask_session)


def create(api, external_order_id="ORD-1"):
    return api.create_order(external_order_id, "MERCHANT-001", {"name": "Jane", "address": "1 Rd"})


def test_create_and_track(api, flask_session):
    created = create(api)

    assert created["status"] == "awaiting_payment"
    assert api.get_package_status("ORD-1")["tracking_number"] == created["tracking_number"]
    method, path, payload, timeout = flask_session.calls[0]
    assert (method, path, timeout) == ("POST", "/orders/ingest", 3)
    assert payload["merchant_id"] == "MERCHANT-001"


def test_simulate_payment_defaults(api, flask_session):
    create(api)

    resp = api.simulate_payment("ORD-1")

    assert resp["order"]["status"] == "payment_verified"
    payload = flask_session.calls[-1][2]
    assert payload["payment_status"] == "success"
    assert payload["payment_transaction_id"].startswith("PAY-")


def test_simulate_payment_rejects_unknown_status(api):
    with pytest.raises(ValueError):
        api.simulate_payment("ORD-1", payment_status="refunded")


def test_dispatch_denied_carries_reason(api):
    tracking = create(api)["tracking_number"]

    with pytest.raises(DispatchDeniedError) as exc:
        api.dispatch_package(tracking)

    assert exc.value.reason == "Not paid yet"


def test_dispatch_unknown_package(api):
    with pytest.raises(NotFoundError, match="Package not found"):
        api.dispatch_package("TRK-00000000")


def test_dispatch_after_payment(api):
    tracking = create(api)["tracking_number"]
    api.simulate_payment("ORD-1")

    assert api.dispatch_package(tracking, "DRIVER-7")["new_status"] == "in_transit"


def test_notify_and_list(api):
    create(api, "ORD-1")
    create(api, "ORD-2")

    assert api.notify_store("ORD-2", "delivered") == {"success": True, "new_status": "delivered"}
    statuses = {o["external_order_id"]: o["status"] for o in api.get_all_orders()}
    assert statuses == {"ORD-1": "awaiting_payment", "ORD-2": "delivered"}


def test_validation_error_surfaces_message(api):
    with pytest.raises(LogisticsError) as exc:
        api.notify_store("ORD-1", "lost")
    assert exc.value.status_code == 400


def test_check_connection(api):
    assert api.check_connection() is True


class UnreachableSession:
    headers = {}

    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


def test_unreachable_server():
    api = LogisticsClient("http://nowhere.test", session=UnreachableSession())

    with pytest.raises(LogisticsError, match="Cannot reach"):
        api.get_all_orders()
    assert api.check_connection() is False


def test_with_base_url_builds_a_new_client():
    api = LogisticsClient("http://a.test/", timeout=4)

    other = api.with_base_url("http://b.test")

    assert api.base_url == "http://a.test"
    assert other.base_url == "http://b.test"
    assert other.timeout == 4
