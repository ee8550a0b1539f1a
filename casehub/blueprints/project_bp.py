"""
Project Blueprint.

Endpoints:
    GET    /api/v1/projects          — List with testCaseCount
    POST   /api/v1/projects          — Create
    GET    /api/v1/projects/<id>     — Detail
    PUT    /api/v1/projects/<id>     — Rename
    DELETE /api/v1/projects/<id>     — Delete (409 while it owns test cases)
"""

from flask import Blueprint, jsonify

from casehub.blueprints import commit_and_discard, created, no_content
from casehub.models.project import Project
from casehub.services import project_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, get_or_404, json_body

project_bp = Blueprint("project", __name__, url_prefix="/api/v1")
register_error_handlers(project_bp)


@project_bp.route("/projects", methods=["GET"])
def list_projects():
    return jsonify(project_service.list_projects())


@project_bp.route("/projects", methods=["POST"])
def create_project():
    project = project_service.create_project(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return created(project.to_dict())


@project_bp.route("/projects/<int:project_id>", methods=["GET"])
def get_project(project_id):
    project, err = get_or_404(Project, project_id, "Project")
    if err:
        return err
    return jsonify(project.to_dict())


@project_bp.route("/projects/<int:project_id>", methods=["PUT"])
def update_project(project_id):
    project = project_service.update_project(project_id, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(project.to_dict())


@project_bp.route("/projects/<int:project_id>", methods=["DELETE"])
def delete_project(project_id):
    attachment_ids = project_service.delete_project(project_id)
    err = commit_and_discard(attachment_ids)
    if err:
        return err
    return no_content()
