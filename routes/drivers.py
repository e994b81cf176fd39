from flask import Blueprint, request, jsonify
from routes import lifecycle

bp = Blueprint("drivers", __name__)

@bp.route("/dispatch", methods=["POST"])
def dispatch():
    data = request.get_json(silent=True) or {}
    package = lifecycle().dispatch(data.get("tracking_number"), data.get("driver_id"))
    return jsonify({"message": "Dispatch successful", "new_status": package.status})
