"""
Bearer-key guard for the Jira integration surface.

Every request under /api/v1/jira must carry
``Authorization: Bearer <JIRA_API_KEY>`` when JIRA_API_KEY is configured.
With no key configured the routes are open (development mode).

    401: header missing or not a Bearer token
    403: token does not match
"""

import hmac
import logging

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)

JIRA_PATH_PREFIX = "/api/v1/jira"


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):]


def check_jira_api_key():
    """Return an error response when the request is not authorised, else None."""
    expected = current_app.config.get("JIRA_API_KEY") or ""
    if not expected:
        return None

    token = _bearer_token()
    if token is None:
        return jsonify({"error": "Missing or invalid Authorization header"}), 401
    if not hmac.compare_digest(token, expected):
        logger.warning("Invalid Jira API key from %s", request.remote_addr)
        return jsonify({"error": "Invalid API key"}), 403
    return None


def init_jira_api_key_auth(app):
    """Register the guard for every /api/v1/jira request."""

    @app.before_request
    def _guard_jira_routes():
        if request.method == "OPTIONS":
            return None
        if request.path == JIRA_PATH_PREFIX or request.path.startswith(JIRA_PATH_PREFIX + "/"):
            return check_jira_api_key()
        return None
