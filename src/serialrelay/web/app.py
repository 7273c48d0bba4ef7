"""
Flask application factory for the serial relay.
"""

from typing import Optional

from flask import Flask, g

from serialrelay.core.config import Config, load_config
from serialrelay.serial.link import SerialLink
from serialrelay.web.websocket import get_hub, init_socketio


def create_app(
    config: Optional[Config] = None,
    link: Optional[SerialLink] = None,
    async_mode: str = "threading",
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Optional Config instance. If None, loads from default location.
        link: Optional serial link. If None, one is built from config.
        async_mode: Flask-SocketIO async mode

    Returns:
        Configured Flask application, with its SocketIO server in
        app.extensions["socketio"]
    """
    app = Flask(__name__)

    if config is None:
        config = load_config()

    app.config["SERIALRELAY_CONFIG"] = config
    app.config["SECRET_KEY"] = "serialrelay-dev-key"  # Change in production

    if link is None:
        link = SerialLink.from_config(config.serial, config.traffic_log_dir)

    init_socketio(
        app,
        link,
        cors_allowed_origins=config.server.cors_allowed_origins,
        async_mode=async_mode,
    )

    from serialrelay.web.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.before_request
    def before_request():
        """Expose hub and config to request handlers."""
        g.hub = get_hub(app)
        g.config = config

    return app
