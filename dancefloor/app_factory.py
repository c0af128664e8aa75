"""
Application factory for Dancefloor.
Wires configuration, database, broadcast hub, services, HTTP blueprints and
Socket.IO handlers together.
"""

import logging
from flask import Flask, jsonify
from flask_socketio import SocketIO
from dancefloor.models import configure_engine, init_db
from dancefloor.routes.dancefloors import dancefloors_bp
from dancefloor.routes.session import session_bp
from dancefloor.routes.song_requests import song_requests_bp
from dancefloor.services.chat_service import ChatService
from dancefloor.services.dancefloor_service import DancefloorService
from dancefloor.services.queue_engine import QueueEngine
from dancefloor.utils import config
from dancefloor.websockets.handlers import register_handlers
from dancefloor.websockets.hub import BroadcastHub


logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """Create the Flask app and its Socket.IO server, returns (app, socketio)"""
    app = Flask(__name__)
    config.init_app(app, test_config)

    if app.config.get("DATABASE_URL"):
        configure_engine(app.config["DATABASE_URL"])
    init_db()

    socketio = SocketIO(
        app,
        cors_allowed_origins=app.config["CORS_ORIGIN"],
        ping_timeout=120,
        ping_interval=30,
        manage_session=False,  # Let Flask-Session own the session
        logger=False,
        engineio_logger=False,
        async_mode=app.config["SOCKETIO_ASYNC_MODE"],
    )

    hub = BroadcastHub(socketio)
    queue_engine = QueueEngine(hub)
    chat_service = ChatService(hub)

    app.socketio = socketio
    app.hub = hub
    app.queue_engine = queue_engine
    app.chat_service = chat_service
    app.dancefloor_service = DancefloorService()

    app.register_blueprint(song_requests_bp, url_prefix="/api")
    app.register_blueprint(dancefloors_bp, url_prefix="/api")
    app.register_blueprint(session_bp, url_prefix="/api")

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    register_handlers(socketio, hub, queue_engine, chat_service)

    logger.info("Dancefloor app created")
    return app, socketio
