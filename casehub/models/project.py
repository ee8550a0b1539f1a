"""Project domain model — top-level container for cases, runs and folders."""

from datetime import datetime, timezone

from casehub.models import db


class Project(db.Model):
    """Workspace that owns test cases, test runs and their folders."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # test_cases use ON DELETE RESTRICT: never let the ORM null them out
    test_cases = db.relationship(
        "TestCase", back_populates="project", lazy="dynamic", passive_deletes="all",
    )
    test_runs = db.relationship(
        "TestRun", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    test_case_folders = db.relationship(
        "TestCaseFolder", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    test_run_folders = db.relationship(
        "TestRunFolder", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"
