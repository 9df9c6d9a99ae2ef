import sys
import logging
from flask import Flask
from dotenv import load_dotenv


def create_app(mapping_store=None):
    load_dotenv()
    app = Flask(__name__)

    # =========================================================
    # Configure logging so logs show up on the host
    # =========================================================
    gunicorn_error = logging.getLogger("gunicorn.error")
    app.logger.handlers = gunicorn_error.handlers
    app.logger.setLevel(logging.INFO)

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter("[%(asctime)s][%(levelname)s] %(message)s", "%H:%M:%S"))
    app.logger.addHandler(sh)

    # =========================================================
    # Durable id mapping (optional)
    # =========================================================
    if mapping_store is None:
        from .services.mapping_store import mapping_store_from_config
        mapping_store = mapping_store_from_config()
    app.extensions["mapping_store"] = mapping_store

    # =========================================================
    # Blueprints
    # =========================================================
    from .routes.sync_product import ROUTE, bp as sync_bp

    app.register_blueprint(sync_bp, url_prefix=ROUTE)

    # =========================================================
    # Health check
    # =========================================================
    @app.get("/health")
    def health():
        app.logger.info("Health check endpoint called")
        return {"ok": True}, 200

    return app
