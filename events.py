import logging

SOCKET_EVENT = "package_event"

NARRATION = {
    "package_ingested": "📦 [INGEST] New order received",
    "payment_verified": "💳 [PAYMENT] Payment verified",
    "payment_ignored": "💤 [PAYMENT] Webhook ignored",
    "status_checked": "🔍 [STATUS] Partner checked status",
    "dispatched": "🚚 [DISPATCH] Driver picked up package",
    "dispatch_denied": "⛔ [BLOCKED] Dispatch denied",
    "status_notified": "🔔 [NOTIFY] Webhook sent to store",
}


class EventPublisher:
    """Narrates lifecycle events to the log and pushes them to Socket.IO clients."""

    def __init__(self, socketio=None, logger=None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger("logistics")

    def publish(self, event, **fields):
        details = " | ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
        title = NARRATION.get(event, event)
        if event == "dispatch_denied":
            self.logger.warning(f"{title}: {details}")
        else:
            self.logger.info(f"{title}: {details}")

        if self.socketio is None:
            return
        try:
            self.socketio.emit(SOCKET_EVENT, {"event": event, **fields})
        except Exception as e:
            # A broken socket must never fail the state change that already committed.
            self.logger.error(f"❌ Socket emit error ({event}): {e}")
