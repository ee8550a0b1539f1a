"""
CaseHub — Test Case & Test Run Management
Blueprint registry.
"""

from flask import jsonify

from casehub.services import attachment_store
from casehub.utils.helpers import db_commit_or_error


def commit_and_discard(attachment_ids):
    """Commit, then remove the attachment files the deleted rows owned.

    Returns an error tuple when the commit fails, in which case no file is
    touched.
    """
    err = db_commit_or_error()
    if err:
        return err
    if attachment_ids:
        attachment_store.discard_files(attachment_ids)
    return None


def no_content():
    return "", 204


def created(payload):
    return jsonify(payload), 201


def all_blueprints():
    from casehub.blueprints.attachment_bp import attachment_bp
    from casehub.blueprints.folder_bp import folder_bp
    from casehub.blueprints.health_bp import health_bp
    from casehub.blueprints.jira_bp import jira_bp
    from casehub.blueprints.project_bp import project_bp
    from casehub.blueprints.settings_bp import settings_bp
    from casehub.blueprints.test_case_bp import test_case_bp
    from casehub.blueprints.test_run_bp import test_run_bp

    return (
        project_bp, test_case_bp, test_run_bp, folder_bp,
        jira_bp, settings_bp, attachment_bp, health_bp,
    )
