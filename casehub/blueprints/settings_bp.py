"""
Settings Blueprint.

Endpoints:
    GET /api/v1/settings   — {jiraBaseUrl}
    PUT /api/v1/settings   — Update {jiraBaseUrl}; trimmed, trailing "/" removed
"""

from flask import Blueprint, jsonify

from casehub.services import settings_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, json_body

settings_bp = Blueprint("settings", __name__, url_prefix="/api/v1")
register_error_handlers(settings_bp)


@settings_bp.route("/settings", methods=["GET"])
def get_settings():
    return jsonify(settings_service.get_settings())


@settings_bp.route("/settings", methods=["PUT"])
def update_settings():
    result = settings_service.update_settings(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(result)
