# backend/offerdesk/__init__.py
__version__ = "0.3.0"

import logging
import os

from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if not app.config.get("UPLOAD_FOLDER"):
        app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "uploads")

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services.pin_service import PinGate
    from .services.storage_service import ImageStore
    from .services.geocoding_service import Geocoder

    app.extensions["pin_gate"] = PinGate(app.config.get("ADMIN_DELETE_PIN"))
    if not app.extensions["pin_gate"].configured:
        app.logger.warning("ADMIN_DELETE_PIN is not set; every PIN-gated operation will be refused")
    app.extensions["image_store"] = ImageStore(
        root=app.config["UPLOAD_FOLDER"],
        public_base_url=app.config["PUBLIC_UPLOAD_BASE_URL"],
        max_bytes=app.config["MAX_IMAGE_BYTES"],
    )
    app.extensions["geocoder"] = Geocoder(
        base_url=app.config["GEOCODER_BASE_URL"],
        user_agent=app.config["GEOCODER_USER_AGENT"],
        timeout=app.config["GEOCODER_TIMEOUT"],
    )

    # Register blueprints
    from .routes.system import system_bp
    from .routes.companies import companies_bp
    from .routes.products import products_bp
    from .routes.stock import stock_bp
    from .routes.free_stock import free_stock_bp
    from .routes.external_items import external_items_bp
    from .routes.offers import offers_bp
    from .routes.offer_pool import offer_pool_bp
    from .routes.customers import customers_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(free_stock_bp)
    app.register_blueprint(external_items_bp)
    app.register_blueprint(offers_bp)
    app.register_blueprint(offer_pool_bp)
    app.register_blueprint(customers_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    @app.errorhandler(413)
    def request_too_large(_error):
        return {"success": False, "error": "Upload too large"}, 413

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
