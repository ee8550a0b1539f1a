"""
Test Run Blueprint.

Endpoints:
    GET    /api/v1/test-runs?projectId=     — List runs of a project
    POST   /api/v1/test-runs                — Create from a test case (snapshot)
    GET    /api/v1/test-runs/<id>           — Detail with steps
    PUT    /api/v1/test-runs/<id>           — Status and/or step patches
    DELETE /api/v1/test-runs/<id>           — Delete with its attachment files
    PATCH  /api/v1/test-runs/<id>/folder    — Move to a folder / out of folders

<id> accepts 5 or TR-5.

PUT is gated by the run lock: once a run is passed or failed, step patches
are refused with 409 while status changes stay allowed.
"""

import logging

from flask import Blueprint, jsonify, request

from casehub.blueprints import commit_and_discard, created, no_content
from casehub.models import db
from casehub.services import attachment_store, folder_service, test_run_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, json_body

logger = logging.getLogger(__name__)

test_run_bp = Blueprint("test_run", __name__, url_prefix="/api/v1")
register_error_handlers(test_run_bp)


@test_run_bp.route("/test-runs", methods=["GET"])
def list_test_runs():
    runs = test_run_service.list_test_runs(request.args.get("projectId"))
    return jsonify([r.to_dict() for r in runs])


@test_run_bp.route("/test-runs", methods=["POST"])
def create_test_run():
    copies = []
    try:
        run = test_run_service.create_test_run(json_body(), run_copies=copies)
    except Exception:
        # no partial run may leave copied files behind
        db.session.rollback()
        attachment_store.discard_files(copies)
        raise

    err = db_commit_or_error()
    if err:
        attachment_store.discard_files(copies)
        logger.error("Test run creation rolled back; removed %d copied files", len(copies))
        return jsonify({"error": "Failed to create test run"}), 500
    return created(run.to_dict(include_steps=True))


@test_run_bp.route("/test-runs/<run_id>", methods=["GET"])
def get_test_run(run_id):
    run = test_run_service.get_test_run(run_id)
    return jsonify(run.to_dict(include_steps=True))


@test_run_bp.route("/test-runs/<run_id>", methods=["PUT"])
def update_test_run(run_id):
    run = test_run_service.update_test_run(run_id, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(run.to_dict(include_steps=True))


@test_run_bp.route("/test-runs/<run_id>", methods=["DELETE"])
def delete_test_run(run_id):
    attachment_ids = test_run_service.delete_test_run(run_id)
    err = commit_and_discard(attachment_ids)
    if err:
        return err
    return no_content()


@test_run_bp.route("/test-runs/<run_id>/folder", methods=["PATCH"])
def move_test_run(run_id):
    folder_service.move_to_folder(folder_service.TEST_RUN_FOLDERS, run_id, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return no_content()
