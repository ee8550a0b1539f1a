"""Project CRUD service.

Transaction policy: functions flush, never commit. The route handler
commits via db_commit_or_error().
"""

from __future__ import annotations

import logging

from sqlalchemy import func

from casehub.core.exceptions import ConflictError
from casehub.models import db
from casehub.models.project import Project
from casehub.models.testing import TestCase, TestRun
from casehub.services import test_run_service
from casehub.utils.helpers import clean_name, require_entity

logger = logging.getLogger(__name__)

SAMPLE_PROJECT_NAME = "Sample Project"
SAMPLE_TEST_CASES = (
    "Login with valid credentials",
    "Submit order form",
    "Export report as PDF",
)


def list_projects() -> list[dict]:
    """All projects ordered by name, each with its test case count."""
    rows = (
        db.session.query(Project, func.count(TestCase.id))
        .outerjoin(TestCase, TestCase.project_id == Project.id)
        .group_by(Project.id)
        .order_by(Project.name.asc(), Project.id.asc())
        .all()
    )
    return [
        {**project.to_dict(), "testCaseCount": int(count)}
        for project, count in rows
    ]


def get_project(project_id: int) -> Project:
    return require_entity(Project, project_id, "Project")


def create_project(data: dict) -> Project:
    project = Project(name=clean_name(data.get("name")))
    db.session.add(project)
    db.session.flush()
    logger.info("Created project id=%s name=%r", project.id, project.name)
    return project


def update_project(project_id: int, data: dict) -> Project:
    name = clean_name(data.get("name"))
    project = get_project(project_id)
    project.name = name
    db.session.flush()
    return project


def delete_project(project_id: int) -> list[str]:
    """Delete an empty project together with its folders and runs.

    Returns the attachment ids owned by the removed runs so the caller can
    discard the files once the transaction has committed.

    Raises:
        NotFoundError: unknown project.
        ConflictError: the project still owns test cases.
    """
    project = get_project(project_id)
    if db.session.query(TestCase.id).filter_by(project_id=project.id).first():
        raise ConflictError("Project has test cases; delete or move them first.")

    attachment_ids: list[str] = []
    for run in TestRun.query.filter_by(project_id=project.id):
        attachment_ids.extend(test_run_service.owned_attachment_ids(run))

    db.session.delete(project)
    db.session.flush()
    logger.info("Deleted project id=%s", project_id)
    return attachment_ids


def seed_sample_project() -> Project | None:
    """Insert the sample project and its cases when no project exists yet."""
    if db.session.query(Project.id).first():
        return None
    project = Project(name=SAMPLE_PROJECT_NAME)
    db.session.add(project)
    db.session.flush()
    for name in SAMPLE_TEST_CASES:
        db.session.add(TestCase(name=name, project_id=project.id))
    db.session.flush()
    return project
