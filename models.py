from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone
import enum
import uuid

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


class PackageStatus(str, enum.Enum):
    AWAITING_PAYMENT = "awaiting_payment"
    PAYMENT_VERIFIED = "payment_verified"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"

    @classmethod
    def values(cls):
        return [s.value for s in cls]


# Forward-only lifecycle; delivered is terminal.
NEXT_STATUS = {
    PackageStatus.AWAITING_PAYMENT.value: PackageStatus.PAYMENT_VERIFIED.value,
    PackageStatus.PAYMENT_VERIFIED.value: PackageStatus.IN_TRANSIT.value,
    PackageStatus.IN_TRANSIT.value: PackageStatus.DELIVERED.value,
    PackageStatus.DELIVERED.value: None,
}


class Package(db.Model):
    __tablename__ = "packages"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    external_order_id = db.Column(db.String(100), unique=True, nullable=False, index=True)
    merchant_id = db.Column(db.String(100))
    tracking_number = db.Column(db.String(12), unique=True, nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False, default=PackageStatus.AWAITING_PAYMENT.value)
    recipient_details = db.Column(db.JSON)
    payment_transaction_id = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "external_order_id": self.external_order_id,
            "merchant_id": self.merchant_id,
            "tracking_number": self.tracking_number,
            "status": self.status,
            "recipient_details": self.recipient_details,
            "payment_transaction_id": self.payment_transaction_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def status_view(self):
        return {
            "external_order_id": self.external_order_id,
            "status": self.status,
            "tracking_number": self.tracking_number,
        }

    def __repr__(self):
        return f"<Package {self.tracking_number} {self.status}>"
