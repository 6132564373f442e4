"""
Flask extension instances.

Centralized extension objects initialized via init_extensions(app, settings).
Import these objects in blueprints instead of creating new instances.
"""

import logging

from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

logger = logging.getLogger(__name__)


def _get_rate_limit_key():
    """
    Rate limit key: the token subject when a valid token is present,
    otherwise the client IP address.
    """
    from backend.auth import PrincipalKind, get_realm, get_token_from_request
    from core.errors import InvalidTokenError

    token = get_token_from_request()
    if token:
        for kind in PrincipalKind:
            try:
                payload = get_realm(kind).issuer.verify(token)
            except InvalidTokenError:
                continue
            return f"{kind.value}:{payload.sub}"
    return f"ip:{get_remote_address()}"


# Uninitialized until init_extensions is called; blueprints decorate routes
# with limiter.limit() at import time and the limits bind on init_app.
limiter = Limiter(key_func=_get_rate_limit_key, strategy="moving-window")
cors = CORS()


def auth_limit():
    """Limit string for login and password-reset endpoints."""
    from flask import current_app
    return current_app.config["AUTH_RATE_LIMIT"]


def init_extensions(app, settings):
    """Initialize all Flask extensions with the app instance.

    Args:
        app: Flask application instance
        settings: AppSettings
    """
    cors.init_app(app, origins=settings.cors_origin_list)

    rate = settings.rate_limit
    app.config["RATELIMIT_ENABLED"] = rate.enabled
    app.config["RATELIMIT_DEFAULT"] = rate.default
    app.config["RATELIMIT_STORAGE_URI"] = rate.storage or "memory://"
    app.config["AUTH_RATE_LIMIT"] = rate.auth
    limiter.init_app(app)

    logger.info(
        f"Extensions ready (rate limiting {'on' if rate.enabled else 'off'}, "
        f"{len(settings.cors_origin_list)} CORS origin(s))"
    )
