"""Flask application setup and blueprint wiring."""

from __future__ import annotations

from flask import Flask, jsonify
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import RequestEntityTooLarge

from credential_hub import database
from credential_hub.routes import register_routes
from credential_hub.utils.auth import register_tab_cleanup

UPLOAD_LIMIT_BYTES = 10 * 1024 * 1024  # 10 MB per request


def create_app() -> Flask:
    """Configure and return the Flask application instance."""
    app = Flask(__name__)
    CORS(
        app,
        resources={
            r"/api/*": {"origins": "*"},
            r"/health": {"origins": "*"},
            r"/solana/*": {"origins": "*"},
            r"/uploads/*": {"origins": "*"},
        },
    )

    app.config["MAX_CONTENT_LENGTH"] = UPLOAD_LIMIT_BYTES

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(_exc):
        return jsonify(message="File too large. The limit is 10 MB per request."), 413

    register_tab_cleanup(app)
    register_routes(app)

    if database.mongodb_enabled():
        try:
            database.ensure_indexes()
            app.logger.info("MongoDB indexes created successfully")
        except PyMongoError as exc:
            app.logger.warning("Failed to create MongoDB indexes: %s", exc)

    return app
