"""Test case service — CRUD and replace-all step persistence.

Transaction policy: functions flush, never commit. Route handlers commit.

Step persistence is deliberately not a diff: every save deletes all step
rows of the case and re-inserts the submitted list with position =
index + 1. Step ids therefore change on every save.
"""
import logging
from collections import defaultdict

from casehub.core.exceptions import ConflictError, ValidationError
from casehub.models import db
from casehub.models.jira import JiraLink
from casehub.models.project import Project
from casehub.models.testing import TestCase, TestCaseStep, TestRun, dump_attachments
from casehub.services import folder_service
from casehub.utils.helpers import clean_name, parse_entity_id, require_entity

logger = logging.getLogger(__name__)


def get_test_case(case_id) -> TestCase:
    return require_entity(TestCase, parse_entity_id(case_id, "TC"), "Test case")


def list_test_cases(project_id=None) -> list[dict]:
    """Flat list ordered by name, with folder info and linked Jira keys."""
    query = TestCase.query
    if project_id not in (None, ""):
        query = query.filter_by(project_id=parse_entity_id(project_id, field="projectId"))
    cases = query.order_by(TestCase.name.asc(), TestCase.id.asc()).all()
    if not cases:
        return []

    keys_by_case = defaultdict(list)
    links = (
        JiraLink.query
        .filter(JiraLink.test_case_id.in_([c.id for c in cases]))
        .order_by(JiraLink.test_case_id, JiraLink.id)
        .all()
    )
    for link in links:
        keys_by_case[link.test_case_id].append(link.jira_issue_key)

    return [
        {**tc.to_dict(), "jiraIssueKeys": keys_by_case.get(tc.id, [])}
        for tc in cases
    ]


def _validated_header(data: dict) -> tuple[str, int]:
    """Return (name, project_id) or raise ValidationError."""
    name = clean_name(data.get("name"))
    raw_pid = data.get("projectId")
    if raw_pid is None or raw_pid == "":
        raise ValidationError("projectId is required")
    pid = parse_entity_id(raw_pid, field="projectId")
    if db.session.get(Project, pid) is None:
        raise ValidationError("Invalid projectId")
    return name, pid


def _validated_steps(steps):
    if steps is None:
        return None
    if not isinstance(steps, list):
        raise ValidationError("steps must be a list")
    cleaned = []
    for step in steps:
        if not isinstance(step, dict):
            raise ValidationError("Each step must be an object")
        cleaned.append(step)
    return cleaned


def replace_steps(test_case: TestCase, steps: list) -> None:
    """Delete every step row of the case and insert ``steps`` in order."""
    TestCaseStep.query.filter_by(test_case_id=test_case.id).delete(synchronize_session=False)
    db.session.expire(test_case, ["steps"])
    for index, step in enumerate(steps):
        db.session.add(TestCaseStep(
            test_case_id=test_case.id,
            position=index + 1,
            step_description=str(step.get("stepDescription") or ""),
            expected_results=str(step.get("expectedResults") or ""),
            attachments=dump_attachments(step.get("attachments")),
        ))
    db.session.flush()
    db.session.expire(test_case, ["steps"])


def create_test_case(data: dict) -> TestCase:
    name, pid = _validated_header(data)
    steps = _validated_steps(data.get("steps"))
    folder_id = folder_service.resolve_folder(
        folder_service.TEST_CASE_FOLDERS, data.get("folderId"), pid,
    )

    test_case = TestCase(name=name, project_id=pid, folder_id=folder_id)
    db.session.add(test_case)
    db.session.flush()
    if steps:
        replace_steps(test_case, steps)
    logger.info("Created test case %s in project %s", test_case.key, pid)
    return test_case


def update_test_case(case_id, data: dict) -> TestCase:
    """Rename / move the case and, when ``steps`` is a list, replace its steps."""
    name, pid = _validated_header(data)
    steps = _validated_steps(data.get("steps"))
    test_case = get_test_case(case_id)

    if pid != test_case.project_id:
        # folders belong to a project; drop the assignment on a project move
        test_case.folder_id = None
    test_case.name = name
    test_case.project_id = pid
    db.session.flush()

    if steps is not None:
        replace_steps(test_case, steps)
    return test_case


def owned_attachment_ids(test_case: TestCase) -> list[str]:
    return [
        att["id"]
        for step in test_case.steps
        for att in step.attachment_list
        if att["id"]
    ]


def delete_test_case(case_id) -> list[str]:
    """Delete a case with its steps and Jira links.

    Returns the attachment ids the removed steps referenced.

    Raises:
        NotFoundError: unknown case.
        ConflictError: test runs were created from this case.
    """
    test_case = get_test_case(case_id)
    if db.session.query(TestRun.id).filter_by(source_test_case_id=test_case.id).first():
        raise ConflictError("Test case is referenced by test runs; delete those runs first.")

    attachment_ids = owned_attachment_ids(test_case)
    db.session.delete(test_case)
    db.session.flush()
    logger.info("Deleted test case %s", test_case.key)
    return attachment_ids
