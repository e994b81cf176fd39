from flask import Flask, current_app, request, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO, emit
from datetime import datetime, timezone
import socket
import os
import logging
from logging.handlers import RotatingFileHandler

from config import Config
from errors import LogisticsError, PersistenceError
from events import EventPublisher
from lifecycle import OrderLifecycleService
from models import db
from routes import drivers, orders, partners, webhooks

socketio = SocketIO(cors_allowed_origins="*", async_mode="threading")


# Logging
def setup_logging(app):
    app.logger.handlers.clear()

    if app.config.get("LOG_TO_FILE"):
        log_dir = app.config["LOG_DIR"]
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(os.path.join(log_dir, "app.log"), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)

    app.logger.setLevel(logging.INFO)
    app.logger.addHandler(console_handler)


def register_error_handlers(app):
    @app.errorhandler(LogisticsError)
    def handle_logistics_error(e):
        if isinstance(e, PersistenceError):
            app.logger.error(f"❌ Store error on {request.path}: {e.message}")
        return jsonify(e.to_dict()), e.status_code


def create_app(config=Config):
    app = Flask(__name__)
    app.config.from_object(config)

    setup_logging(app)
    CORS(app)
    db.init_app(app)
    socketio.init_app(app)

    events = EventPublisher(socketio, app.logger)
    app.extensions["lifecycle"] = OrderLifecycleService.from_config(app.config, db.session, events)

    app.register_blueprint(orders.bp)
    app.register_blueprint(webhooks.bp, url_prefix="/webhooks")
    app.register_blueprint(partners.bp)
    app.register_blueprint(drivers.bp)
    register_error_handlers(app)

    # Health Check
    @app.route("/")
    def health():
        return jsonify({"status": "ok", "time": datetime.now(timezone.utc).isoformat()})

    with app.app_context():
        db.create_all()

    return app


# WebSocket
@socketio.on('connect')
def handle_connect(auth=None):
    current_app.logger.info(f'✅ Dashboard connected: {request.sid}')
    emit('connection_response', {'data': 'Connected'})


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    current_app.logger.info(f'❌ Dashboard disconnected: {request.sid}')


def get_local_ip():
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packet is sent; connecting a UDP socket only selects the outbound interface.
            s.connect(("10.255.255.255", 1))
            return s.getsockname()[0]
    except OSError:
        return "localhost"


if __name__ == "__main__":
    app = create_app()
    port = app.config["PORT"]
    app.logger.info("=" * 50)
    app.logger.info("🚀 LOGISTICS ENGINE ACTIVE")
    app.logger.info("-" * 50)
    app.logger.info(f"> Local:   http://localhost:{port}")
    app.logger.info(f"> LAN:     http://{get_local_ip()}:{port}")
    if app.config.get("STRICT_TRANSITIONS"):
        app.logger.info("> Strict status transitions enabled")
    app.logger.info("=" * 50)

    socketio.run(app, host=app.config["HOST"], port=port, debug=False, allow_unsafe_werkzeug=True)
