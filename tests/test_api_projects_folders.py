"""
CaseHub — Tests: Projects and Folders API.

Covers:
    - Project CRUD, testCaseCount, delete guard, cascade of runs and folders
    - Test-case and test-run folder CRUD, unique names, reparent on delete
    - Sample project seeding
"""

import pytest

from casehub.models import db
from casehub.models.project import Project
from casehub.models.testing import TestCase
from casehub.services import project_service


class TestProjects:
    def test_create_and_get(self, client):
        res = client.post("/api/v1/projects", json={"name": "  Web Shop "})
        assert res.status_code == 201
        body = res.get_json()
        assert body["name"] == "Web Shop"

        res = client.get(f"/api/v1/projects/{body['id']}")
        assert res.status_code == 200
        assert res.get_json() == {"id": body["id"], "name": "Web Shop"}

    def test_create_requires_name(self, client):
        res = client.post("/api/v1/projects", json={})
        assert res.status_code == 400
        assert res.get_json()["error"] == "Name is required"

    def test_list_sorted_with_counts(self, client, make_project, make_case):
        b = make_project("Beta")
        make_project("Alpha")
        make_case(name="One", project_id=b["id"])
        make_case(name="Two", project_id=b["id"])

        body = client.get("/api/v1/projects").get_json()
        names = [p["name"] for p in body]
        assert names == sorted(names)
        counts = {p["name"]: p["testCaseCount"] for p in body}
        assert counts["Beta"] == 2
        assert counts["Alpha"] == 0

    def test_rename(self, client, project):
        res = client.put(f"/api/v1/projects/{project['id']}", json={"name": "Renamed"})
        assert res.status_code == 200
        assert res.get_json()["name"] == "Renamed"

    def test_rename_unknown(self, client):
        assert client.put("/api/v1/projects/999", json={"name": "X"}).status_code == 404

    def test_get_unknown(self, client):
        res = client.get("/api/v1/projects/999")
        assert res.status_code == 404
        assert res.get_json()["error"] == "Project not found"

    def test_delete_guarded_by_cases(self, client, project, make_case):
        make_case()
        res = client.delete(f"/api/v1/projects/{project['id']}")
        assert res.status_code == 409
        assert res.get_json()["error"] == "Project has test cases; delete or move them first."

    def test_delete_empty_project(self, client, project):
        folder = client.post("/api/v1/test-case-folders",
                             json={"name": "F", "projectId": project["id"]}).get_json()
        res = client.delete(f"/api/v1/projects/{project['id']}")
        assert res.status_code == 204
        assert client.get(f"/api/v1/projects/{project['id']}").status_code == 404
        res = client.get(f"/api/v1/test-case-folders?projectId={project['id']}")
        assert folder["id"] not in [f["id"] for f in res.get_json()]

    def test_delete_cascades_orphaned_runs(self, client, make_project, make_case, make_run,
                                           upload_png, upload_folder):
        home = make_project("Home")
        away = make_project("Away")
        att = upload_png()
        tc = make_case(project_id=home["id"],
                       steps=[{"stepDescription": "A", "attachments": [att]}])
        run = make_run(tc)
        copy_id = run["steps"][0]["attachments"][0]["id"]

        # move the case out so the project is empty but still owns the run
        client.put(f"/api/v1/test-cases/{tc['id']}", json={"name": tc["name"], "projectId": away["id"]})

        res = client.delete(f"/api/v1/projects/{home['id']}")
        assert res.status_code == 204
        assert client.get(f"/api/v1/test-runs/{run['id']}").status_code == 404
        assert not (upload_folder / f"{copy_id}.png").exists()
        assert (upload_folder / f"{att['id']}.png").exists()

    def test_delete_unknown(self, client):
        assert client.delete("/api/v1/projects/999").status_code == 404


class TestSeedSample:
    def test_seeds_into_empty_database(self):
        project = project_service.seed_sample_project()
        db.session.commit()
        assert project.name == project_service.SAMPLE_PROJECT_NAME
        names = sorted(tc.name for tc in TestCase.query.filter_by(project_id=project.id))
        assert names == sorted(project_service.SAMPLE_TEST_CASES)

    def test_noop_when_projects_exist(self, project):
        assert project_service.seed_sample_project() is None
        assert Project.query.count() == 1

    def test_cli_command(self, app):
        result = app.test_cli_runner().invoke(args=["seed-sample"])
        assert result.exit_code == 0
        assert Project.query.filter_by(name=project_service.SAMPLE_PROJECT_NAME).count() == 1


@pytest.mark.parametrize("path, child", [
    ("test-case-folders", "test-cases"),
    ("test-run-folders", "test-runs"),
])
class TestFolders:
    def _child(self, client, child, make_case, make_run):
        tc = make_case(name="Child case")
        if child == "test-cases":
            return tc
        return make_run(tc, name="Child run")

    def test_crud(self, client, project, path, child):
        res = client.post(f"/api/v1/{path}", json={"name": "Zeta", "projectId": project["id"]})
        assert res.status_code == 201
        folder = res.get_json()
        assert folder == {"id": folder["id"], "name": "Zeta", "projectId": project["id"]}
        client.post(f"/api/v1/{path}", json={"name": "Alpha", "projectId": project["id"]})

        listed = client.get(f"/api/v1/{path}?projectId={project['id']}").get_json()
        assert [f["name"] for f in listed] == ["Alpha", "Zeta"]

        res = client.put(f"/api/v1/{path}/{folder['id']}", json={"name": "Omega"})
        assert res.status_code == 200
        assert res.get_json()["name"] == "Omega"

        assert client.delete(f"/api/v1/{path}/{folder['id']}").status_code == 204
        listed = client.get(f"/api/v1/{path}?projectId={project['id']}").get_json()
        assert [f["name"] for f in listed] == ["Alpha"]

    def test_list_requires_project(self, client, path, child):
        assert client.get(f"/api/v1/{path}").status_code == 400

    def test_unknown_project(self, client, path, child):
        res = client.post(f"/api/v1/{path}", json={"name": "F", "projectId": 999})
        assert res.status_code == 404

    def test_duplicate_name(self, client, project, path, child):
        client.post(f"/api/v1/{path}", json={"name": "Dup", "projectId": project["id"]})
        res = client.post(f"/api/v1/{path}", json={"name": "Dup", "projectId": project["id"]})
        assert res.status_code == 409
        assert res.get_json()["error"] == "A folder with this name already exists"

    def test_rename_to_existing_name(self, client, project, path, child):
        client.post(f"/api/v1/{path}", json={"name": "One", "projectId": project["id"]})
        two = client.post(f"/api/v1/{path}", json={"name": "Two", "projectId": project["id"]}).get_json()
        res = client.put(f"/api/v1/{path}/{two['id']}", json={"name": "One"})
        assert res.status_code == 409

    def test_same_name_in_other_project(self, client, project, make_project, path, child):
        other = make_project("Other")
        client.post(f"/api/v1/{path}", json={"name": "Same", "projectId": project["id"]})
        res = client.post(f"/api/v1/{path}", json={"name": "Same", "projectId": other["id"]})
        assert res.status_code == 201

    def test_delete_reparents_children(self, client, project, make_case, make_run, path, child):
        folder = client.post(f"/api/v1/{path}", json={"name": "F", "projectId": project["id"]}).get_json()
        item = self._child(client, child, make_case, make_run)
        client.patch(f"/api/v1/{child}/{item['id']}/folder", json={"folderId": folder["id"]})
        assert client.get(f"/api/v1/{child}/{item['id']}").get_json()["folderId"] == folder["id"]

        assert client.delete(f"/api/v1/{path}/{folder['id']}").status_code == 204
        fetched = client.get(f"/api/v1/{child}/{item['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()["folderId"] is None

    def test_rename_unknown(self, client, path, child):
        assert client.put(f"/api/v1/{path}/999", json={"name": "X"}).status_code == 404

    def test_delete_unknown(self, client, path, child):
        assert client.delete(f"/api/v1/{path}/999").status_code == 404
