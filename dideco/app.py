"""
DIDECO Aid Ledger API - Flask Application Entry Point

This module builds the Flask application: configuration from the
environment, the state store and its snapshot backend, middleware and the
route blueprints.
"""

import os
from datetime import datetime
from typing import Any, Mapping, Optional
from flask_openapi3 import OpenAPI, Info

from . import __version__
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .middleware.error_handler import ErrorHandlerMiddleware
from .services.snapshot import create_snapshot_service
from .services.store import AppStore

# OpenAPI info
info = Info(
    title="DIDECO Aid Ledger API",
    version=__version__,
    description="Social aid management: beneficiaries, inventory, benefit catalog and aid deliveries"
)


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> dict:
    """Configuration from environment variables, then ``overrides``."""
    config = {
        'ENVIRONMENT': os.getenv('ENVIRONMENT', 'development'),
        'SECRET_KEY': os.getenv('SECRET_KEY', 'dev-secret-key'),
        'STORAGE_BACKEND': os.getenv('STORAGE_BACKEND', 'file'),
        'DATA_FILE': os.getenv('DATA_FILE', 'dideco-storage.json'),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'STORAGE_KEY': os.getenv('STORAGE_KEY', 'dideco-storage'),
        'CRITICAL_STOCK_THRESHOLD': int(os.getenv('CRITICAL_STOCK_THRESHOLD', '5')),
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
    }
    config.update(overrides or {})
    config['DEBUG'] = config['ENVIRONMENT'] == 'development'
    return config


def create_app(config: Optional[Mapping[str, Any]] = None, store: Optional[AppStore] = None) -> OpenAPI:
    """
    Build the application.

    Args:
        config: configuration overrides
        store: ready-made store; loaded from the configured snapshot backend when omitted

    Returns:
        Configured Flask application
    """
    settings = load_config(config)

    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(__name__, info=info)
    app.config.update(settings)

    add_observability_middleware(app, instrument=settings['OTEL_ENABLED'])
    ErrorHandlerMiddleware(app)

    if store is None:
        store = AppStore.load(create_snapshot_service(settings))
    app.store = store

    # Register routes
    from .routes.auth import auth_bp
    from .routes.tables import beneficiaries_bp, professionals_bp, users_bp, inventory_bp
    from .routes.benefits import benefits_bp
    from .routes.aid import aid_bp
    from .routes.reports import reports_bp

    for blueprint in (auth_bp, beneficiaries_bp, professionals_bp, users_bp,
                      inventory_bp, benefits_bp, aid_bp, reports_bp):
        app.register_blueprint(blueprint)

    @app.route('/api/healthz')
    def health_check():
        """Health check with storage availability."""
        snapshot_service = app.store.snapshot_service
        storage_ok = snapshot_service is not None and snapshot_service.is_available()

        return {
            "status": "healthy" if storage_ok else "degraded",
            "service": "dideco-aid-ledger",
            "version": __version__,
            "environment": app.config['ENVIRONMENT'],
            "storage": {
                "backend": app.config['STORAGE_BACKEND'],
                "available": storage_ok
            },
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }

    return app


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
