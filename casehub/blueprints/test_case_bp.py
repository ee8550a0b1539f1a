"""
Test Case Blueprint.

Endpoints:
    GET    /api/v1/test-cases                — List (?projectId= optional)
    POST   /api/v1/test-cases                — Create (optional folderId, steps)
    GET    /api/v1/test-cases/<id>           — Detail with steps
    PUT    /api/v1/test-cases/<id>           — Update; a steps list replaces all steps
    DELETE /api/v1/test-cases/<id>           — Delete (409 while runs reference it)
    PATCH  /api/v1/test-cases/<id>/folder    — Move to a folder / out of folders

<id> accepts 5 or TC-5.
"""

from flask import Blueprint, jsonify, request

from casehub.blueprints import commit_and_discard, created, no_content
from casehub.services import folder_service, test_case_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, json_body

test_case_bp = Blueprint("test_case", __name__, url_prefix="/api/v1")
register_error_handlers(test_case_bp)


@test_case_bp.route("/test-cases", methods=["GET"])
def list_test_cases():
    return jsonify(test_case_service.list_test_cases(request.args.get("projectId")))


@test_case_bp.route("/test-cases", methods=["POST"])
def create_test_case():
    test_case = test_case_service.create_test_case(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return created(test_case.to_dict(include_steps=True))


@test_case_bp.route("/test-cases/<case_id>", methods=["GET"])
def get_test_case(case_id):
    test_case = test_case_service.get_test_case(case_id)
    return jsonify(test_case.to_dict(include_steps=True))


@test_case_bp.route("/test-cases/<case_id>", methods=["PUT"])
def update_test_case(case_id):
    test_case = test_case_service.update_test_case(case_id, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(test_case.to_dict(include_steps=True))


@test_case_bp.route("/test-cases/<case_id>", methods=["DELETE"])
def delete_test_case(case_id):
    attachment_ids = test_case_service.delete_test_case(case_id)
    err = commit_and_discard(attachment_ids)
    if err:
        return err
    return no_content()


@test_case_bp.route("/test-cases/<case_id>/folder", methods=["PATCH"])
def move_test_case(case_id):
    folder_service.move_to_folder(folder_service.TEST_CASE_FOLDERS, case_id, json_body())
    err = db_commit_or_error()
    if err:
        return err
    return no_content()
