"""
CaseHub — Test Case & Test Run Management
Testing domain models.

Models:
    - TestCase:       reusable, ordered sequence of steps
    - TestCaseStep:   one step of a test case (position is 1-based, contiguous)
    - TestRun:        snapshot of a test case taken at creation time
    - TestRunStep:    copied step plus the run-local execution fields

Architecture ref:
    Project ──1:N──▶ Test Case ──1:N──▶ Test Case Step
    Project ──1:N──▶ Test Run  ──1:N──▶ Test Run Step
    Test Case ──0:N──▶ Test Run  (source, SET NULL on delete; name is frozen)

Attachments are stored as a JSON array in a text column of each step row.
The binary files live in the attachment store, keyed by attachment id.
"""

import json
from datetime import datetime, timezone

from casehub.models import db


# ── Constants ────────────────────────────────────────────────────────────

RUN_STATUSES = (
    "ready_to_test", "in_progress", "passed", "failed", "na",
)

# Runs in these states accept status changes only
LOCKED_RUN_STATUSES = frozenset({"passed", "failed"})

STEP_STATUSES = (
    "not_run", "passed", "failed", "na", "passed_with_improvements",
)

ATTACHMENT_MIME_TYPES = ("image/png", "image/jpeg")


def is_locked(status):
    """Return True when a run in ``status`` rejects step edits."""
    return status in LOCKED_RUN_STATUSES


# ── Attachment column helpers ────────────────────────────────────────────

def _guess_mime_type(url, filename):
    """JPEG when the url or filename says so, PNG otherwise."""
    for name in (url, filename or ""):
        lowered = str(name).lower()
        if lowered.endswith((".jpg", ".jpeg")) or lowered.startswith("data:image/jpeg"):
            return "image/jpeg"
    return "image/png"


def normalize_attachment(item):
    """Coerce one stored/submitted attachment into the API shape.

    Older rows stored the image inline under ``dataUrl``; it is used as the
    url when no url is present.
    """
    url = str(item.get("url") or item.get("dataUrl") or "")
    return {
        "id": str(item.get("id") or ""),
        "filename": str(item.get("filename") or ""),
        "mimeType": item.get("mimeType") or _guess_mime_type(url, item.get("filename")),
        "url": url,
    }


def parse_attachments(raw):
    """Decode an attachments text column. Malformed JSON yields []."""
    try:
        parsed = json.loads(raw or "[]")
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [normalize_attachment(item) for item in parsed if isinstance(item, dict)]


def dump_attachments(items):
    """Encode a list of attachments for storage."""
    if not isinstance(items, list):
        items = []
    return json.dumps(
        [normalize_attachment(item) for item in items if isinstance(item, dict)],
    )


def _iso(value):
    return value.isoformat() if value else None


# ═════════════════════════════════════════════════════════════════════════════
# TEST CASE
# ═════════════════════════════════════════════════════════════════════════════

class TestCase(db.Model):
    """Reusable test case owned by a project."""

    __tablename__ = "test_cases"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    folder_id = db.Column(
        db.Integer,
        db.ForeignKey("test_case_folders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ── Audit
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships
    project = db.relationship("Project", back_populates="test_cases")
    folder = db.relationship("TestCaseFolder")
    steps = db.relationship(
        "TestCaseStep", backref="test_case",
        order_by="TestCaseStep.position",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    jira_links = db.relationship(
        "JiraLink", backref="test_case", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    source_runs = db.relationship(
        "TestRun", back_populates="source_test_case", lazy="dynamic",
        passive_deletes=True,
    )

    @property
    def key(self):
        return f"TC-{self.id}"

    def to_dict(self, include_steps=False):
        d = {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "projectId": self.project_id,
            "folderId": self.folder_id,
            "folderName": self.folder.name if self.folder else None,
        }
        if include_steps:
            d["projectName"] = self.project.name if self.project else None
            d["steps"] = [s.to_dict() for s in self.steps]
        return d

    def __repr__(self):
        return f"<TestCase {self.key}: {self.name}>"


class TestCaseStep(db.Model):
    """Atomic step within a test case. Rows are replaced wholesale on save."""

    __tablename__ = "test_case_steps"

    id = db.Column(db.Integer, primary_key=True)
    test_case_id = db.Column(
        db.Integer, db.ForeignKey("test_cases.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0, comment="1-based order")
    step_description = db.Column(db.Text, nullable=False, default="")
    expected_results = db.Column(db.Text, nullable=False, default="")
    attachments = db.Column(db.Text, nullable=False, default="[]", comment="JSON array")

    @property
    def attachment_list(self):
        return parse_attachments(self.attachments)

    def to_dict(self):
        return {
            "id": self.id,
            "position": self.position,
            "stepDescription": self.step_description or "",
            "expectedResults": self.expected_results or "",
            "attachments": self.attachment_list,
        }

    def __repr__(self):
        return f"<TestCaseStep {self.id}: case#{self.test_case_id} pos#{self.position}>"


# ═════════════════════════════════════════════════════════════════════════════
# TEST RUN
# ═════════════════════════════════════════════════════════════════════════════

class TestRun(db.Model):
    """
    Execution of one test case, snapshotted at creation.

    Lifecycle: ready_to_test ⇄ in_progress ⇄ passed | failed | na
    Any status may move to any other status; passed/failed lock the steps.
    """

    __tablename__ = "test_runs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    status = db.Column(
        db.String(30), nullable=False, default="ready_to_test",
        comment="ready_to_test | in_progress | passed | failed | na",
    )
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    folder_id = db.Column(
        db.Integer, db.ForeignKey("test_run_folders.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    source_test_case_id = db.Column(
        db.Integer, db.ForeignKey("test_cases.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    source_test_case_name = db.Column(db.String(50), nullable=False, default="")

    # ── Audit (updated_at is set explicitly by every update call)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships
    project = db.relationship("Project", back_populates="test_runs")
    folder = db.relationship("TestRunFolder")
    source_test_case = db.relationship("TestCase", back_populates="source_runs")
    steps = db.relationship(
        "TestRunStep", backref="test_run",
        order_by="TestRunStep.position",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    jira_links = db.relationship(
        "TestRunJiraLink", backref="test_run", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def key(self):
        return f"TR-{self.id}"

    @property
    def is_locked(self):
        return is_locked(self.status)

    def to_dict(self, include_steps=False):
        d = {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "status": self.status,
            "projectId": self.project_id,
            "folderId": self.folder_id,
            "folderName": self.folder.name if self.folder else None,
            "sourceTestCaseId": self.source_test_case_id,
            "sourceTestCaseName": self.source_test_case_name,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_steps:
            d["projectName"] = self.project.name if self.project else None
            d["steps"] = [s.to_dict() for s in self.steps]
        return d

    def __repr__(self):
        return f"<TestRun {self.key}: {self.name} [{self.status}]>"


class TestRunStep(db.Model):
    """
    Step of a test run.

    step_description / expected_results / attachments are frozen copies of
    the source step. actual_results, actual_result_attachments, checked and
    step_status are the only fields a run may change.
    """

    __tablename__ = "test_run_steps"

    id = db.Column(db.Integer, primary_key=True)
    test_run_id = db.Column(
        db.Integer, db.ForeignKey("test_runs.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)
    step_description = db.Column(db.Text, nullable=False, default="")
    expected_results = db.Column(db.Text, nullable=False, default="")
    attachments = db.Column(db.Text, nullable=False, default="[]")

    actual_results = db.Column(db.Text, nullable=False, default="")
    actual_result_attachments = db.Column(db.Text, nullable=False, default="[]")
    checked = db.Column(db.Boolean, nullable=False, default=False)
    step_status = db.Column(
        db.String(30), nullable=False, default="not_run",
        comment="not_run | passed | failed | na | passed_with_improvements",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "position": self.position,
            "stepDescription": self.step_description or "",
            "expectedResults": self.expected_results or "",
            "attachments": parse_attachments(self.attachments),
            "actualResults": self.actual_results or "",
            "actualResultAttachments": parse_attachments(self.actual_result_attachments),
            "checked": bool(self.checked),
            "stepStatus": self.step_status or "not_run",
        }

    def __repr__(self):
        return f"<TestRunStep {self.id}: run#{self.test_run_id} pos#{self.position} → {self.step_status}>"
