from flask import Blueprint, request, jsonify
from routes import lifecycle

bp = Blueprint("webhooks", __name__)

@bp.route("/payment", methods=["POST"])
def payment_webhook():
    data = request.get_json(silent=True) or {}
    package = lifecycle().confirm_payment(
        data.get("external_order_id"),
        data.get("payment_transaction_id"),
        data.get("payment_status"),
    )
    if package is None:
        return jsonify({"message": "Ignored"}), 200

    return jsonify({"message": "Payment recorded", "order": package.to_dict()})
