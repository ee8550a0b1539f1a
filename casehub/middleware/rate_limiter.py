"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter. The Limiter
instance is created in casehub/__init__.py with no default limits; this
module applies the limits per route category.

Usage:
    from casehub.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "120/minute"
READ_LIMIT = "300/minute"
UPLOAD_LIMIT = "30/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Attachment uploads: 30/minute
        - Entity CRUD:        120/minute (run auto-save sends a PUT per edit burst)
        - Settings / Jira:    300/minute
        - Health check:       exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("attachment")
    if bp:
        limiter.limit(UPLOAD_LIMIT)(bp)

    for bp_name in ("project", "test_case", "test_run", "folder"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    for bp_name in ("jira", "settings"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured: uploads %s, CRUD %s, jira/settings %s",
        UPLOAD_LIMIT, WRITE_LIMIT, READ_LIMIT,
    )
