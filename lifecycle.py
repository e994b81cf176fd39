"""Order lifecycle: the only place package status is decided.

Every status write is a single conditional UPDATE checked by rows affected, so
a guard and the write it protects can never be split by a concurrent request.
"""
from contextlib import contextmanager
import secrets

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import (
    DispatchDeniedError,
    NotFoundError,
    PersistenceError,
    TransitionDeniedError,
    ValidationError,
)
from events import EventPublisher
from models import NEXT_STATUS, Package, PackageStatus, utcnow

TRACKING_PREFIX = "TRK-"


def generate_tracking_number():
    return f"{TRACKING_PREFIX}{secrets.token_hex(4).upper()}"


def _require_text(value, field):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


class OrderLifecycleService:
    def __init__(
        self,
        session,
        events=None,
        strict_transitions=False,
        tracking_attempts=5,
        tracking_number_factory=generate_tracking_number,
    ):
        self.session = session
        self.events = events or EventPublisher()
        self.strict_transitions = strict_transitions
        self.tracking_attempts = max(1, int(tracking_attempts))
        self.tracking_number_factory = tracking_number_factory

    @classmethod
    def from_config(cls, config, session, events=None):
        return cls(
            session,
            events=events,
            strict_transitions=config.get("STRICT_TRANSITIONS", False),
            tracking_attempts=config.get("TRACKING_NUMBER_ATTEMPTS", 5),
        )

    @contextmanager
    def _store(self):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(str(getattr(e, "orig", None) or e)) from e

    def _packages(self):
        return self.session.query(Package)

    def _latest_by_order(self, external_order_id):
        return (
            self._packages()
            .filter(Package.external_order_id == external_order_id)
            .order_by(Package.created_at.desc())
            .first()
        )

    # Ingest
    def ingest(self, external_order_id, merchant_id, recipient_details):
        _require_text(external_order_id, "external_order_id")
        if not isinstance(merchant_id, str):
            raise ValidationError("merchant_id is required")
        if not isinstance(recipient_details, dict):
            raise ValidationError("recipient_details is required")
        _require_text(recipient_details.get("name"), "recipient_details.name")
        _require_text(recipient_details.get("address"), "recipient_details.address")

        with self._store():
            for attempt in range(1, self.tracking_attempts + 1):
                tracking_number = self.tracking_number_factory()
                package = Package(
                    external_order_id=external_order_id,
                    merchant_id=merchant_id,
                    recipient_details=dict(recipient_details),
                    tracking_number=tracking_number,
                    status=PackageStatus.AWAITING_PAYMENT.value,
                )
                self.session.add(package)
                try:
                    self.session.commit()
                except IntegrityError:
                    self.session.rollback()
                    taken = self._packages().filter_by(tracking_number=tracking_number).first()
                    if taken is None:
                        raise
                    self.events.logger.warning(
                        f"⚠️ Tracking number collision {tracking_number} (attempt {attempt})"
                    )
                    continue

                self.events.publish(
                    "package_ingested",
                    external_order_id=external_order_id,
                    tracking_number=tracking_number,
                    status=package.status,
                )
                return package

        raise PersistenceError("Could not allocate a unique tracking number")

    # ConfirmPayment
    def confirm_payment(self, external_order_id, payment_transaction_id=None, payment_status=None):
        """Apply a payment webhook.

        Returns the updated package, or None when the webhook is ignored
        because the payment did not succeed.
        """
        if payment_status != "success":
            self.events.publish(
                "payment_ignored",
                external_order_id=external_order_id,
                payment_status=payment_status,
            )
            return None

        _require_text(external_order_id, "external_order_id")
        target = PackageStatus.PAYMENT_VERIFIED.value

        with self._store():
            query = self._packages().filter(Package.external_order_id == external_order_id)
            if self.strict_transitions:
                query = query.filter(Package.status == PackageStatus.AWAITING_PAYMENT.value)
            updated = query.update(
                {
                    "status": target,
                    "payment_transaction_id": payment_transaction_id,
                    "updated_at": utcnow(),
                },
                synchronize_session=False,
            )
            self.session.commit()
            package = self._latest_by_order(external_order_id)

        if package is None:
            raise NotFoundError("Order not found")
        if not updated:
            raise TransitionDeniedError(package.status, target)

        self.events.publish(
            "payment_verified",
            external_order_id=external_order_id,
            payment_transaction_id=payment_transaction_id,
        )
        return package

    # Dispatch
    def dispatch(self, tracking_number, driver_id=None):
        _require_text(tracking_number, "tracking_number")

        with self._store():
            updated = (
                self._packages()
                .filter(
                    Package.tracking_number == tracking_number,
                    Package.status == PackageStatus.PAYMENT_VERIFIED.value,
                )
                .update(
                    {"status": PackageStatus.IN_TRANSIT.value, "updated_at": utcnow()},
                    synchronize_session=False,
                )
            )
            self.session.commit()
            package = self._packages().filter_by(tracking_number=tracking_number).first()

        if package is None:
            raise NotFoundError("Package not found")
        if not updated:
            self.events.publish(
                "dispatch_denied",
                tracking_number=tracking_number,
                driver_id=driver_id,
                status=package.status,
            )
            raise DispatchDeniedError("Not paid yet")

        self.events.publish(
            "dispatched",
            tracking_number=tracking_number,
            driver_id=driver_id,
            previous_status=PackageStatus.PAYMENT_VERIFIED.value,
            status=package.status,
        )
        return package

    # NotifyStatus
    def notify_status(self, external_order_id, status):
        """Overwrite the status of an order.

        Without strict transitions any enum value is written, including
        regressions; an unknown order id matches nothing and is not an error.
        Returns the number of packages updated.
        """
        _require_text(external_order_id, "external_order_id")
        if status not in PackageStatus.values():
            raise ValidationError(f"status must be one of {', '.join(PackageStatus.values())}")

        current = None
        with self._store():
            query = self._packages().filter(Package.external_order_id == external_order_id)
            if self.strict_transitions:
                predecessors = [s for s, nxt in NEXT_STATUS.items() if nxt == status]
                query = query.filter(Package.status.in_(predecessors))
            updated = query.update(
                {"status": status, "updated_at": utcnow()},
                synchronize_session=False,
            )
            self.session.commit()
            if not updated and self.strict_transitions:
                current = self._latest_by_order(external_order_id)

        if current is not None:
            raise TransitionDeniedError(current.status, status)

        self.events.publish(
            "status_notified",
            external_order_id=external_order_id,
            status=status,
            matched=updated,
        )
        return updated

    # GetStatus
    def get_status(self, external_order_id):
        with self._store():
            package = self._latest_by_order(external_order_id)
        if package is None:
            raise NotFoundError("Order not found")

        self.events.publish(
            "status_checked",
            external_order_id=external_order_id,
            status=package.status,
        )
        return package.status_view()

    # ListAll
    def list_all(self):
        with self._store():
            return self._packages().order_by(Package.created_at.desc()).all()
