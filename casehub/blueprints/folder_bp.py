"""
Folder Blueprint — one folder level per project, for test cases and test runs.

Endpoints (for each of /test-case-folders and /test-run-folders):
    GET    /api/v1/<folders>?projectId=   — List, ordered by name
    POST   /api/v1/<folders>              — Create {name, projectId}
    PUT    /api/v1/<folders>/<id>         — Rename {name}
    DELETE /api/v1/<folders>/<id>         — Delete; children move to "no folder"
"""

from flask import Blueprint, jsonify, request

from casehub.blueprints import created, no_content
from casehub.services import folder_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, json_body

folder_bp = Blueprint("folder", __name__, url_prefix="/api/v1")
register_error_handlers(folder_bp)

_KINDS = {
    "test-case-folders": folder_service.TEST_CASE_FOLDERS,
    "test-run-folders": folder_service.TEST_RUN_FOLDERS,
}


def _register(path, kind):
    endpoint = path.replace("-", "_")

    def list_folders():
        folders = folder_service.list_folders(kind, request.args.get("projectId"))
        return jsonify([f.to_dict() for f in folders])

    def create_folder():
        folder = folder_service.create_folder(kind, json_body())
        err = db_commit_or_error()
        if err:
            return err
        return created(folder.to_dict())

    def rename_folder(folder_id):
        folder = folder_service.rename_folder(kind, folder_id, json_body())
        err = db_commit_or_error()
        if err:
            return err
        return jsonify(folder.to_dict())

    def delete_folder(folder_id):
        folder_service.delete_folder(kind, folder_id)
        err = db_commit_or_error()
        if err:
            return err
        return no_content()

    folder_bp.add_url_rule(f"/{path}", f"list_{endpoint}", list_folders, methods=["GET"])
    folder_bp.add_url_rule(f"/{path}", f"create_{endpoint}", create_folder, methods=["POST"])
    folder_bp.add_url_rule(
        f"/{path}/<int:folder_id>", f"rename_{endpoint}", rename_folder, methods=["PUT"],
    )
    folder_bp.add_url_rule(
        f"/{path}/<int:folder_id>", f"delete_{endpoint}", delete_folder, methods=["DELETE"],
    )


for _path, _kind in _KINDS.items():
    _register(_path, _kind)
