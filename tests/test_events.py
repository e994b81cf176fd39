import logging

from events import SOCKET_EVENT, EventPublisher


def package_events(sio):
    return [msg["args"][0] for msg in sio.get_received() if msg["name"] == SOCKET_EVENT]


def test_lifecycle_changes_are_broadcast(http, sio):
    tracking = http.post("/orders/ingest", json={
        "external_order_id": "ORD-1",
        "merchant_id": "M-1",
        "recipient_details": {"name": "Jane", "address": "1 Rd"},
    }).get_json()["tracking_number"]
    http.post("/dispatch", json={"tracking_number": tracking, "driver_id": "DRIVER-9"})

    events = package_events(sio)

    assert [e["event"] for e in events] == ["package_ingested", "dispatch_denied"]
    assert events[0]["tracking_number"] == tracking
    assert events[1]["driver_id"] == "DRIVER-9"
    assert events[1]["status"] == "awaiting_payment"


def test_ignored_payment_is_broadcast(http, sio):
    http.post("/webhooks/payment", json={"external_order_id": "ORD-1", "payment_status": "pending"})

    events = package_events(sio)

    assert events == [{"event": "payment_ignored", "external_order_id": "ORD-1", "payment_status": "pending"}]


def test_connect_gets_acknowledged(app):
    from app import socketio

    client = socketio.test_client(app)
    received = client.get_received()
    client.disconnect()

    assert received[0]["name"] == "connection_response"


class ExplodingSocket:
    def emit(self, *args, **kwargs):
        raise RuntimeError("socket closed")


def test_emit_failure_is_logged_not_raised(caplog):
    publisher = EventPublisher(ExplodingSocket(), logging.getLogger("tests.events"))

    with caplog.at_level(logging.INFO, logger="tests.events"):
        publisher.publish("dispatched", tracking_number="TRK-1A2B3C4D")

    messages = [r.getMessage() for r in caplog.records]
    assert any("DISPATCH" in m and "TRK-1A2B3C4D" in m for m in messages)
    assert any("socket closed" in m for m in messages)


def test_denied_dispatch_logs_a_warning(caplog):
    publisher = EventPublisher(logger=logging.getLogger("tests.events"))

    with caplog.at_level(logging.INFO, logger="tests.events"):
        publisher.publish("dispatch_denied", tracking_number="TRK-1A2B3C4D", driver_id=None)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "driver_id" not in record.getMessage()
