"""
Flask Application Factory.

Creates and configures the Flask app with all extensions and blueprints.
Collaborators (database, mail sender, realms, record stores) are built from
an explicit AppSettings object and stored on ``app.extensions``.
"""

import uuid
import time
import logging

from flask import Flask, request, g

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(settings=None, config=None, mail_sender=None):
    """Create and configure the Flask application.

    Args:
        settings: AppSettings; defaults to get_settings().
        config: Optional dict of Flask config overrides (e.g. {'TESTING': True}).
        mail_sender: Optional NotificationSender replacement (tests).

    Returns:
        Configured Flask app instance.
    """
    if settings is None:
        from config.settings import get_settings
        settings = get_settings()

    app = Flask(__name__, static_folder=None)
    app.json.sort_keys = False

    if config:
        app.config.update(config)

    # Configure logging
    from backend.logging_config import configure_logging
    configure_logging(settings, app)

    # Initialize extensions (CORS, limiter)
    from backend.extensions import init_extensions
    init_extensions(app, settings)

    # Register custom error handlers for APIError hierarchy
    from core.errors import register_error_handlers
    register_error_handlers(app)

    # Database, mail, realms, record stores
    _init_services(app, settings, mail_sender)

    # Register blueprints
    _register_blueprints(app)

    # Register middleware
    _register_middleware(app)

    return app


def _init_services(app, settings, mail_sender):
    """Build the collaborators every request handler reaches through app.extensions."""
    from core.db import DatabaseManager
    from core import schema
    from backend.auth import build_realms
    from backend.inbox import donation_box, message_box
    from backend.inventory import EquipmentCatalog
    from backend.mail import NotificationSender
    from backend.newsletters import NewsletterList
    from backend.orders import OrderBook

    db = DatabaseManager.from_settings(settings.database)
    schema.initialize(db)

    sender = mail_sender or NotificationSender.from_settings(settings.mail)

    app.extensions["settings"] = settings
    app.extensions["db"] = db
    app.extensions["mail"] = sender
    app.extensions["realms"] = build_realms(settings, db, sender)
    app.extensions["equipment"] = EquipmentCatalog(db)
    app.extensions["orders"] = OrderBook(db)
    app.extensions["messages"] = message_box(db)
    app.extensions["donations"] = donation_box(db)
    app.extensions["newsletters"] = NewsletterList(db)


def _register_blueprints(app):
    """Register all route blueprints."""
    from backend.extensions import limiter

    # Health checks
    from backend.routes.health import health_bp
    app.register_blueprint(health_bp)
    limiter.exempt(health_bp)

    # Auth (login limits applied per route)
    from backend.routes.auth_routes import auth_bp
    app.register_blueprint(auth_bp)

    # Principals
    from backend.routes.admins import admins_bp
    app.register_blueprint(admins_bp)

    from backend.routes.clients import clients_bp
    app.register_blueprint(clients_bp)

    # Inventory and orders
    from backend.routes.equipment import equipment_bp
    app.register_blueprint(equipment_bp)

    from backend.routes.orders import orders_bp
    app.register_blueprint(orders_bp)

    # Public submissions
    from backend.routes.submissions import donations_bp, messages_bp, newsletters_bp
    app.register_blueprint(messages_bp)
    app.register_blueprint(donations_bp)
    app.register_blueprint(newsletters_bp)


def _register_middleware(app):
    """Register request tracking and security middleware."""

    @app.before_request
    def before_request_tracking():
        """Assign request ID and start the request timer."""
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4())[:8])
        g.start_time = time.time()

    @app.after_request
    def after_request_tracking(response):
        """Log request completion with timing and add security headers."""
        duration_ms = 0
        if hasattr(g, 'start_time'):
            duration_ms = (time.time() - g.start_time) * 1000

        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        if request.path in ['/healthz', '/readyz']:
            log_level = logging.DEBUG

        principal = getattr(g, 'principal', None)
        logger.log(
            log_level,
            f"{request.method} {request.path} -> {response.status_code} ({duration_ms:.1f}ms)",
            extra={
                'request_id': getattr(g, 'request_id', 'unknown'),
                'method': request.method,
                'endpoint': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration_ms, 2),
                'remote_addr': request.remote_addr,
                'principal': f"{principal.kind.value}:{principal.id}" if principal else None,
            }
        )

        # Security headers
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response
