"""
Shared pytest fixtures for the CaseHub test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - upload_folder: fresh attachment folder per test (autouse)
    - client: Flask test client (function-scoped)
    - make_project / make_case / make_run / upload_png: API-level factories
"""

import io

import pytest

from casehub import create_app
from casehub.models import db as _db

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture(autouse=True)
def upload_folder(app, tmp_path):
    """Point the attachment store at an empty per-test folder."""
    folder = tmp_path / "uploads"
    folder.mkdir()
    previous = app.config["UPLOAD_FOLDER"]
    app.config["UPLOAD_FOLDER"] = str(folder)
    yield folder
    app.config["UPLOAD_FOLDER"] = previous


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def make_project(client):
    def _make(name="Project Alpha"):
        res = client.post("/api/v1/projects", json={"name": name})
        assert res.status_code == 201, res.get_json()
        return res.get_json()
    return _make


@pytest.fixture()
def project(make_project):
    return make_project()


@pytest.fixture()
def make_case(client, project):
    def _make(name="Login works", steps=None, project_id=None, **extra):
        payload = {"name": name, "projectId": project_id or project["id"], **extra}
        if steps is not None:
            payload["steps"] = steps
        res = client.post("/api/v1/test-cases", json=payload)
        assert res.status_code == 201, res.get_json()
        return res.get_json()
    return _make


@pytest.fixture()
def make_run(client):
    def _make(test_case, name="Run 1", **extra):
        res = client.post(
            "/api/v1/test-runs",
            json={"name": name, "testCaseId": test_case["id"], **extra},
        )
        assert res.status_code == 201, res.get_json()
        return res.get_json()
    return _make


@pytest.fixture()
def upload_png(client):
    """Upload an image through the API and return its attachment reference."""
    def _upload(filename="shot.png", data=PNG_BYTES, mimetype="image/png"):
        res = client.post(
            "/api/v1/attachments",
            data={"file": (io.BytesIO(data), filename, mimetype)},
            content_type="multipart/form-data",
        )
        assert res.status_code == 201, res.get_json()
        return res.get_json()
    return _upload
