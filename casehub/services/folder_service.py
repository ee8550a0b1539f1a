"""Folder service — the same CRUD for test-case folders and test-run folders.

A folder kind is described by a FolderKind: the folder model, the child
model it groups and a label for messages. Deleting a folder reparents its
children to "no folder".
"""

from __future__ import annotations

from dataclasses import dataclass

from casehub.core.exceptions import ConflictError, NotFoundError, ValidationError
from casehub.models import db
from casehub.models.folder import TestCaseFolder, TestRunFolder
from casehub.models.project import Project
from casehub.models.testing import TestCase, TestRun
from casehub.utils.helpers import clean_name, parse_entity_id, require_entity


@dataclass(frozen=True)
class FolderKind:
    folder_model: type
    child_model: type
    child_prefix: str
    child_label: str


TEST_CASE_FOLDERS = FolderKind(TestCaseFolder, TestCase, "TC", "Test case")
TEST_RUN_FOLDERS = FolderKind(TestRunFolder, TestRun, "TR", "Test run")


def _ensure_unique(kind: FolderKind, project_id: int, name: str, exclude_id: int | None = None):
    query = kind.folder_model.query.filter_by(project_id=project_id, name=name)
    if exclude_id is not None:
        query = query.filter(kind.folder_model.id != exclude_id)
    if query.first():
        raise ConflictError("A folder with this name already exists")


def list_folders(kind: FolderKind, project_id) -> list:
    if project_id in (None, ""):
        raise ValidationError("projectId query parameter is required")
    pid = parse_entity_id(project_id, field="projectId")
    return (
        kind.folder_model.query
        .filter_by(project_id=pid)
        .order_by(kind.folder_model.name.asc())
        .all()
    )


def create_folder(kind: FolderKind, data: dict):
    name = clean_name(data.get("name"))
    pid = parse_entity_id(data.get("projectId"), field="projectId")
    require_entity(Project, pid, "Project")
    _ensure_unique(kind, pid, name)

    folder = kind.folder_model(name=name, project_id=pid)
    db.session.add(folder)
    db.session.flush()
    return folder


def rename_folder(kind: FolderKind, folder_id: int, data: dict):
    name = clean_name(data.get("name"))
    folder = require_entity(kind.folder_model, folder_id, "Folder")
    _ensure_unique(kind, folder.project_id, name, exclude_id=folder.id)
    folder.name = name
    db.session.flush()
    return folder


def delete_folder(kind: FolderKind, folder_id: int) -> None:
    folder = require_entity(kind.folder_model, folder_id, "Folder")
    (
        kind.child_model.query
        .filter_by(folder_id=folder.id)
        .update({"folder_id": None}, synchronize_session="fetch")
    )
    db.session.delete(folder)
    db.session.flush()


def resolve_folder(kind: FolderKind, raw_folder_id, project_id: int | None):
    """Validate a folderId payload value. Returns the folder id or None.

    Raises:
        ValidationError: not an integer.
        NotFoundError: unknown folder, or a folder of another project.
    """
    if raw_folder_id is None:
        return None
    folder_id = parse_entity_id(raw_folder_id, field="folderId")
    folder = db.session.get(kind.folder_model, folder_id)
    if folder is None or (project_id is not None and folder.project_id != project_id):
        raise NotFoundError(resource="Folder", resource_id=folder_id)
    return folder.id


def move_to_folder(kind: FolderKind, child_id, data: dict) -> None:
    """Assign a test case / test run to a folder, or to none with null."""
    cid = parse_entity_id(child_id, kind.child_prefix)
    child = require_entity(kind.child_model, cid, kind.child_label)
    child.folder_id = resolve_folder(kind, data.get("folderId"), child.project_id)
    db.session.flush()
