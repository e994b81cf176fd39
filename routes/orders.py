from flask import Blueprint, request, jsonify
from errors import PersistenceError
from routes import lifecycle

bp = Blueprint("orders", __name__)

@bp.route("/orders", methods=["GET"])
def list_orders():
    packages = lifecycle().list_all()
    return jsonify([p.to_dict() for p in packages])

@bp.route("/orders/ingest", methods=["POST"])
def ingest_order():
    data = request.get_json(silent=True) or {}
    try:
        package = lifecycle().ingest(
            data.get("external_order_id"),
            data.get("merchant_id"),
            data.get("recipient_details"),
        )
    except PersistenceError as e:
        return jsonify({"error": e.message}), 400

    return jsonify({
        "message": "Order received",
        "tracking_number": package.tracking_number,
        "status": package.status
    }), 201
