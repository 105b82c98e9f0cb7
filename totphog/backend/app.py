"""
FLASK APP ENTRY POINT - TOTPHOG BACKEND SERVER
==============================================

Builds the Flask app: configuration, logging, CORS, the credential store
and the /api/v1 blueprint.

Main features
- create_app() factory; the store is created once per app and shared by
  every request through app.extensions["totphog"]
- CORS enabled so a separate frontend can call the API
- one lock serialises all store calls (Flask serves requests on threads)
"""
from typing import Any, Mapping, Optional
import logging
import threading

from flask import Flask, jsonify
from flask_cors import CORS

from totphog.config import Config
from totphog.database import CredentialStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def create_app(
    config_overrides: Optional[Mapping[str, Any]] = None,
    store: Optional[CredentialStore] = None,
) -> Flask:
    """
    Create the TOTPHog Flask app.

    Arguments:
        config_overrides: values that win over Config / the environment
            (e.g. {"STORAGE_PATH": tmp_path / "tokens.json"})
        store: an already built CredentialStore; by default one is opened
            at app.config["STORAGE_PATH"]
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"], format=LOG_FORMAT)

    # Let a frontend served from another origin call the API
    CORS(app, origins=app.config["CORS_ORIGINS"])

    if store is None:
        store = CredentialStore(str(app.config["STORAGE_PATH"]))
    app.extensions["totphog"] = {"store": store, "lock": threading.Lock()}
    logger.info("Credential store: %s (%d credential(s))", store.storage_path, len(store))

    from totphog.backend.routes import api_bp
    app.register_blueprint(api_bp)

    @app.route("/", methods=["GET"])
    def index():
        """Short API overview."""
        return jsonify({
            "service": app.config["SERVICE_NAME"],
            "version": app.config["VERSION"],
            "endpoints": {
                "GET /api/v1/tokens": "List tokens",
                "POST /api/v1/tokens": "Create a token ({uri} or {name, secret, ...})",
                "GET /api/v1/tokens/<id>": "Get one token",
                "DELETE /api/v1/tokens/<id>": "Delete one token",
                "DELETE /api/v1/tokens": "Delete all tokens",
                "GET /api/v1/tokens/<id>/code": "Current code",
                "GET /api/v1/tokens/<id>/uri": "otpauth:// provisioning URI",
                "GET /api/v1/tokens/<id>/qr": "Provisioning QR code (PNG)",
                "GET /api/v1/codes": "Current codes for every token",
                "GET /api/v1/health": "Health check",
            },
        })

    return app


def main() -> None:
    """Run the development server with the configured host / port."""
    app = create_app()
    app.run(debug=app.config["DEBUG"], host=app.config["HOST"], port=app.config["PORT"])


if __name__ == "__main__":
    main()
