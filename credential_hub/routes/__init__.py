"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask, jsonify

from .auth import bp as session_bp
from .health import bp as health_bp
from .navigation import bp as navigation_bp
from .resume import bp as resume_bp
from .solana import bp as solana_bp
from .tabs import bp as tabs_bp
from .uploads import bp as uploads_bp
from .users import bp as users_bp
from .verifications import bp as verifications_bp

API_VERSION = "0.1.0"


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(tabs_bp)
    app.register_blueprint(navigation_bp)
    app.register_blueprint(session_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(resume_bp)
    app.register_blueprint(verifications_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(solana_bp)

    @app.get("/")
    def index():
        return (
            jsonify(
                message="Blockchain Credential Hub API",
                version=API_VERSION,
                endpoints={
                    "health": "/health",
                    "solana": {"account": "/solana/account/:address"},
                    "tabs": "/api/tabs",
                    "navigation": "/api/navigation",
                    "session": "/api/session",
                    "users": "/api/users/:walletAddress",
                    "resume": "/api/resume/parse",
                    "verifications": "/api/verifications",
                },
            ),
            200,
        )
