"""Jira issue links for test cases and test runs.

Issue keys are trimmed and upper-cased before they are stored or looked
up, so "proj-1 " and "PROJ-1" are the same link.
"""

from __future__ import annotations

import logging

from casehub.core.exceptions import ConflictError, ValidationError
from casehub.models import db
from casehub.models.jira import JiraLink, TestRunJiraLink
from casehub.models.testing import TestCase, TestRun
from casehub.services import test_case_service
from casehub.utils.helpers import parse_entity_id, require_entity

logger = logging.getLogger(__name__)


def normalize_issue_key(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("jiraIssueKey is required")
    key = value.strip().upper()
    if len(key) > 50:
        raise ValidationError("jiraIssueKey must be at most 50 characters")
    return key


# ── Test case links ──────────────────────────────────────────────────────────

def list_case_links(issue_key=None, test_case_id=None) -> list[dict]:
    """Links for one issue key (with case name and project) or for one case."""
    if isinstance(issue_key, str) and issue_key.strip():
        rows = (
            db.session.query(JiraLink, TestCase.name, TestCase.project_id)
            .join(TestCase, TestCase.id == JiraLink.test_case_id)
            .filter(JiraLink.jira_issue_key == issue_key.strip().upper())
            .order_by(JiraLink.created_at.desc(), JiraLink.id.desc())
            .all()
        )
        return [
            {**link.to_dict(), "testCaseName": name, "projectId": project_id}
            for link, name, project_id in rows
        ]

    if isinstance(test_case_id, str) and test_case_id.strip():
        cid = parse_entity_id(test_case_id, "TC", field="testCaseId")
        links = (
            JiraLink.query.filter_by(test_case_id=cid)
            .order_by(JiraLink.created_at.desc(), JiraLink.id.desc())
            .all()
        )
        return [link.to_dict() for link in links]

    raise ValidationError("Provide issueKey or testCaseId query parameter")


def create_case_link(data: dict) -> JiraLink:
    if data.get("testCaseId") in (None, ""):
        raise ValidationError("testCaseId is required")
    cid = parse_entity_id(data.get("testCaseId"), "TC", field="testCaseId")
    key = normalize_issue_key(data.get("jiraIssueKey"))
    require_entity(TestCase, cid, "Test case")

    if JiraLink.query.filter_by(test_case_id=cid, jira_issue_key=key).first():
        raise ConflictError("Link already exists")

    link = JiraLink(test_case_id=cid, jira_issue_key=key)
    db.session.add(link)
    db.session.flush()
    logger.info("Linked TC-%s to %s", cid, key)
    return link


def delete_case_link(link_id: int) -> None:
    link = require_entity(JiraLink, link_id, "Jira link")
    db.session.delete(link)
    db.session.flush()


def create_test_case_with_link(data: dict) -> dict:
    """Create a test case and link it to an issue in the same transaction."""
    key = normalize_issue_key(data.get("jiraIssueKey"))
    test_case = test_case_service.create_test_case({
        "name": data.get("name"),
        "projectId": data.get("projectId"),
    })
    db.session.add(JiraLink(test_case_id=test_case.id, jira_issue_key=key))
    db.session.flush()
    return {**test_case.to_dict(), "jiraIssueKey": key}


# ── Test run links ───────────────────────────────────────────────────────────

def list_run_links(test_run_id) -> list[dict]:
    if not isinstance(test_run_id, str) or not test_run_id.strip():
        raise ValidationError("Provide testRunId query parameter")
    rid = parse_entity_id(test_run_id, "TR", field="testRunId")
    links = (
        TestRunJiraLink.query.filter_by(test_run_id=rid)
        .order_by(TestRunJiraLink.created_at.desc(), TestRunJiraLink.id.desc())
        .all()
    )
    return [link.to_dict() for link in links]


def create_run_link(data: dict) -> TestRunJiraLink:
    if data.get("testRunId") in (None, ""):
        raise ValidationError("testRunId is required")
    rid = parse_entity_id(data.get("testRunId"), "TR", field="testRunId")
    key = normalize_issue_key(data.get("jiraIssueKey"))
    require_entity(TestRun, rid, "Test run")

    if TestRunJiraLink.query.filter_by(test_run_id=rid, jira_issue_key=key).first():
        raise ConflictError("Link already exists")

    link = TestRunJiraLink(test_run_id=rid, jira_issue_key=key)
    db.session.add(link)
    db.session.flush()
    logger.info("Linked TR-%s to %s", rid, key)
    return link


def delete_run_link(link_id: int) -> None:
    link = require_entity(TestRunJiraLink, link_id, "Jira link")
    db.session.delete(link)
    db.session.flush()
