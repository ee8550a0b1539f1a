"""
Jira integration Blueprint.

Guarded by casehub.middleware.api_key_auth when JIRA_API_KEY is set.

Endpoints:
    GET    /api/v1/jira/links?issueKey=|testCaseId=   — Case links
    POST   /api/v1/jira/links                          — Link a case {testCaseId, jiraIssueKey}
    DELETE /api/v1/jira/links/<id>                     — Unlink
    POST   /api/v1/jira/test-cases                     — Create a case already linked
    GET    /api/v1/jira/run-links?testRunId=           — Run links
    POST   /api/v1/jira/run-links                      — Link a run {testRunId, jiraIssueKey}
    DELETE /api/v1/jira/run-links/<id>                 — Unlink
"""

from flask import Blueprint, jsonify, request

from casehub.blueprints import created, no_content
from casehub.services import jira_service
from casehub.utils.errors import register_error_handlers
from casehub.utils.helpers import db_commit_or_error, json_body

jira_bp = Blueprint("jira", __name__, url_prefix="/api/v1/jira")
register_error_handlers(jira_bp)


@jira_bp.route("/links", methods=["GET"])
def list_links():
    return jsonify(jira_service.list_case_links(
        issue_key=request.args.get("issueKey"),
        test_case_id=request.args.get("testCaseId"),
    ))


@jira_bp.route("/links", methods=["POST"])
def create_link():
    link = jira_service.create_case_link(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return created(link.to_dict())


@jira_bp.route("/links/<int:link_id>", methods=["DELETE"])
def delete_link(link_id):
    jira_service.delete_case_link(link_id)
    err = db_commit_or_error()
    if err:
        return err
    return no_content()


@jira_bp.route("/test-cases", methods=["POST"])
def create_linked_test_case():
    payload = jira_service.create_test_case_with_link(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return created(payload)


@jira_bp.route("/run-links", methods=["GET"])
def list_run_links():
    return jsonify(jira_service.list_run_links(request.args.get("testRunId")))


@jira_bp.route("/run-links", methods=["POST"])
def create_run_link():
    link = jira_service.create_run_link(json_body())
    err = db_commit_or_error()
    if err:
        return err
    return created(link.to_dict())


@jira_bp.route("/run-links/<int:link_id>", methods=["DELETE"])
def delete_run_link(link_id):
    jira_service.delete_run_link(link_id)
    err = db_commit_or_error()
    if err:
        return err
    return no_content()
