"""initial_schema

Projects, folders, test cases, test runs, Jira links and settings.

Revision ID: 8f3a2c1d4b70
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "8f3a2c1d4b70"
down_revision = None
branch_labels = None
depends_on = None


def _folder_table(name):
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name=f"uq_{name}_project_name"),
    )
    op.create_index(f"ix_{name}_project_id", name, ["project_id"])


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "projects" not in existing_tables:
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    for folder_table in ("test_case_folders", "test_run_folders"):
        if folder_table not in existing_tables:
            _folder_table(folder_table)

    if "test_cases" not in existing_tables:
        op.create_table(
            "test_cases",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("folder_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["folder_id"], ["test_case_folders.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_test_cases_project_id", "test_cases", ["project_id"])
        op.create_index("ix_test_cases_folder_id", "test_cases", ["folder_id"])

    if "test_case_steps" not in existing_tables:
        op.create_table(
            "test_case_steps",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("test_case_id", sa.Integer(), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False, comment="1-based order"),
            sa.Column("step_description", sa.Text(), nullable=False),
            sa.Column("expected_results", sa.Text(), nullable=False),
            sa.Column("attachments", sa.Text(), nullable=False, comment="JSON array"),
            sa.ForeignKeyConstraint(["test_case_id"], ["test_cases.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_test_case_steps_test_case_id", "test_case_steps", ["test_case_id"])

    if "test_runs" not in existing_tables:
        op.create_table(
            "test_runs",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("status", sa.String(length=30), nullable=False, server_default="ready_to_test"),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("folder_id", sa.Integer(), nullable=True),
            sa.Column("source_test_case_id", sa.Integer(), nullable=True),
            sa.Column("source_test_case_name", sa.String(length=50), nullable=False, server_default=""),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["folder_id"], ["test_run_folders.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["source_test_case_id"], ["test_cases.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_test_runs_project_id", "test_runs", ["project_id"])
        op.create_index("ix_test_runs_folder_id", "test_runs", ["folder_id"])
        op.create_index("ix_test_runs_source_test_case_id", "test_runs", ["source_test_case_id"])

    if "test_run_steps" not in existing_tables:
        op.create_table(
            "test_run_steps",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("test_run_id", sa.Integer(), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False),
            sa.Column("step_description", sa.Text(), nullable=False),
            sa.Column("expected_results", sa.Text(), nullable=False),
            sa.Column("attachments", sa.Text(), nullable=False),
            sa.Column("actual_results", sa.Text(), nullable=False),
            sa.Column("actual_result_attachments", sa.Text(), nullable=False),
            sa.Column("checked", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("step_status", sa.String(length=30), nullable=False, server_default="not_run"),
            sa.ForeignKeyConstraint(["test_run_id"], ["test_runs.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_test_run_steps_test_run_id", "test_run_steps", ["test_run_id"])

    if "jira_links" not in existing_tables:
        op.create_table(
            "jira_links",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("test_case_id", sa.Integer(), nullable=False),
            sa.Column("jira_issue_key", sa.String(length=50), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["test_case_id"], ["test_cases.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("test_case_id", "jira_issue_key", name="uq_jira_links_case_key"),
        )
        op.create_index("ix_jira_links_test_case_id", "jira_links", ["test_case_id"])
        op.create_index("ix_jira_links_jira_issue_key", "jira_links", ["jira_issue_key"])

    if "test_run_jira_links" not in existing_tables:
        op.create_table(
            "test_run_jira_links",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("test_run_id", sa.Integer(), nullable=False),
            sa.Column("jira_issue_key", sa.String(length=50), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["test_run_id"], ["test_runs.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "test_run_id", "jira_issue_key", name="uq_test_run_jira_links_run_key",
            ),
        )
        op.create_index("ix_test_run_jira_links_test_run_id", "test_run_jira_links", ["test_run_id"])
        op.create_index(
            "ix_test_run_jira_links_jira_issue_key", "test_run_jira_links", ["jira_issue_key"],
        )

    if "settings" not in existing_tables:
        op.create_table(
            "settings",
            sa.Column("key", sa.String(length=100), nullable=False),
            sa.Column("value", sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint("key"),
        )


def downgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    # children before parents
    for table in (
        "settings",
        "test_run_jira_links",
        "jira_links",
        "test_run_steps",
        "test_runs",
        "test_case_steps",
        "test_cases",
        "test_run_folders",
        "test_case_folders",
        "projects",
    ):
        if table in existing_tables:
            op.drop_table(table)
