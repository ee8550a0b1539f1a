"""
Folder models — flat, non-nesting groupings inside a project.

Models:
  - TestCaseFolder: groups test cases
  - TestRunFolder:  groups test runs

Both kinds share one shape {id, name, project_id}. Deleting a folder
moves its children to "no folder" (folder_id = NULL); it never cascades.
"""

from datetime import datetime, timezone

from casehub.models import db


class _FolderMixin:
    """Columns and serialisation shared by both folder kinds."""

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "projectId": self.project_id,
        }


class TestCaseFolder(_FolderMixin, db.Model):
    """Folder holding test cases."""

    __tablename__ = "test_case_folders"

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        db.UniqueConstraint("project_id", "name", name="uq_test_case_folders_project_name"),
    )

    def __repr__(self):
        return f"<TestCaseFolder {self.id}: {self.name}>"


class TestRunFolder(_FolderMixin, db.Model):
    """Folder holding test runs."""

    __tablename__ = "test_run_folders"

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        db.UniqueConstraint("project_id", "name", name="uq_test_run_folders_project_name"),
    )

    def __repr__(self):
        return f"<TestRunFolder {self.id}: {self.name}>"
