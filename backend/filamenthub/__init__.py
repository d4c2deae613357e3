"""Application factory and blueprint registration."""
from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from .config import BaseConfig
from .db.session import db
from .api.health.routes import bp as health_bp
from .api.profiles.routes import bp as profiles_bp
from .api.files.routes import bp as files_bp
from .docs.routes import bp as docs_bp
from .errors import register_error_handlers
from .integrations.supabase_client import supabase_ext
from .log import setup_logging
from .storage.ext_storage import storage


def create_app(config_class: type[BaseConfig] | BaseConfig | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    config = config_class() if isinstance(config_class, type) else config_class
    app.config.from_object(config or BaseConfig())
    setup_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FILE"))

    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    CORS(app, resources={r"/api/*": {"origins": origins or "*"}})

    # Init extensions
    db.init_app(app)
    supabase_ext.init_app(app)
    storage.init_app(app)

    # Register blueprints
    app.register_blueprint(health_bp, url_prefix="/api/health")
    app.register_blueprint(profiles_bp, url_prefix="/api/profiles")
    app.register_blueprint(files_bp, url_prefix="/api/files")
    app.register_blueprint(docs_bp)

    # Global error handlers
    register_error_handlers(app)
    return app
