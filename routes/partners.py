from flask import Blueprint, request, jsonify
from routes import lifecycle

bp = Blueprint("partners", __name__)

@bp.route("/partners/status/<external_order_id>", methods=["GET"])
def get_status(external_order_id):
    return jsonify(lifecycle().get_status(external_order_id))

@bp.route("/notify", methods=["POST"])
def notify():
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    lifecycle().notify_status(data.get("external_order_id"), status)
    return jsonify({"success": True, "new_status": status})
