"""
Jira issue links.

Models:
  - JiraLink:         test case ↔ Jira issue key
  - TestRunJiraLink:  test run  ↔ Jira issue key

One issue key may link many cases/runs and one case/run may carry many
keys; the (entity, key) pair is unique. Keys are stored upper-cased.
"""

from datetime import datetime, timezone

from casehub.models import db


class JiraLink(db.Model):
    """Jira issue linked to a test case."""

    __tablename__ = "jira_links"

    id = db.Column(db.Integer, primary_key=True)
    test_case_id = db.Column(
        db.Integer,
        db.ForeignKey("test_cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    jira_issue_key = db.Column(db.String(50), nullable=False, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("test_case_id", "jira_issue_key", name="uq_jira_links_case_key"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "testCaseId": self.test_case_id,
            "testCaseKey": f"TC-{self.test_case_id}",
            "jiraIssueKey": self.jira_issue_key,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<JiraLink {self.id}: TC-{self.test_case_id} → {self.jira_issue_key}>"


class TestRunJiraLink(db.Model):
    """Jira issue linked to a test run."""

    __tablename__ = "test_run_jira_links"

    id = db.Column(db.Integer, primary_key=True)
    test_run_id = db.Column(
        db.Integer,
        db.ForeignKey("test_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    jira_issue_key = db.Column(db.String(50), nullable=False, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("test_run_id", "jira_issue_key", name="uq_test_run_jira_links_run_key"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "testRunId": self.test_run_id,
            "testRunKey": f"TR-{self.test_run_id}",
            "jiraIssueKey": self.jira_issue_key,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<TestRunJiraLink {self.id}: TR-{self.test_run_id} → {self.jira_issue_key}>"
