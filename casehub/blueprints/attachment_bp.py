"""
Attachment Blueprint — PNG/JPEG step images.

Endpoints:
    POST   /api/v1/attachments          — Multipart upload (field "file")
    DELETE /api/v1/attachments/<id>     — Remove a stored file
    GET    /api/v1/uploads/<filename>   — Serve a stored file
"""

from flask import Blueprint, current_app, request, send_from_directory

from casehub.blueprints import created, no_content
from casehub.services import attachment_store
from casehub.utils.errors import register_error_handlers

attachment_bp = Blueprint("attachment", __name__, url_prefix="/api/v1")
register_error_handlers(attachment_bp)


@attachment_bp.route("/attachments", methods=["POST"])
def upload_attachment():
    return created(attachment_store.save_upload(request.files.get("file")))


@attachment_bp.route("/attachments/<path:attachment_id>", methods=["DELETE"])
def delete_attachment(attachment_id):
    attachment_store.delete_attachment(attachment_id)
    return no_content()


@attachment_bp.route("/uploads/<path:filename>", methods=["GET"])
def serve_upload(filename):
    # send_from_directory rejects paths escaping the folder with a 404
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
