"""Tests for the client dashboard project endpoints."""
from datetime import datetime

import pytest

from app.db.session import PROJECTS, USERS

URL = "/api/v1/client-projects"


@pytest.mark.api
class TestListClientProjects:

    def test_lists_only_own_projects_newest_first(self, client, db, seed_project, client_headers):
        seed_project(_id="old", createdAt=datetime(2026, 1, 1))
        seed_project(_id="new", createdAt=datetime(2026, 2, 1))
        seed_project(_id="foreign", clientId="u2")

        response = client.get(URL, headers=client_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["id"] for p in body["projects"]] == ["new", "old"]

    def test_dashboard_shape(self, client, seed_project, client_headers):
        seed_project(status="reviewed")

        project = client.get(URL, headers=client_headers).json()["projects"][0]

        assert project["title"] == "Storefront redesign"
        assert project["priority"] == "high"
        assert project["status"] == "reviewed"
        assert project["canonicalStatus"] == "in_progress"
        assert project["pricing"]["fixedBudget"] == "1200"
        assert project["createdAt"] == "2026-01-05T09:30:00"

    def test_requires_identity(self, client):
        response = client.get(URL)
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}

    def test_admin_is_not_a_client(self, client, admin_headers):
        response = client.get(URL, headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorized access"


@pytest.mark.api
class TestCreateClientProject:

    def test_creates_pending_project_and_counts_it(self, client, db, client_headers):
        response = client.post(URL, headers=client_headers, json={
            "projectDetails": {"title": "Mobile app", "description": "iOS first"},
            "pricing": {"type": "milestone", "milestones": [{"title": "MVP", "budget": 900}]},
            "priority": "critical",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Project created successfully"

        stored = db[PROJECTS].find_one({"projectDetails.title": "Mobile app"})
        assert str(stored["_id"]) == body["projectId"]
        assert stored["clientId"] == "u1"
        assert stored["status"] == "pending"
        assert stored["progress"] == 0
        assert stored["priority"] == "critical"
        assert stored["userInfo"]["email"] == "client@example.com"
        assert stored["milestones"][0]["title"] == "MVP"
        assert stored["milestones"][0]["budget"] == "900"
        assert stored["milestones"][0]["status"] == "pending"
        assert db[USERS].find_one({"_id": "u1"})["projectsCount"] == 2

    def test_title_is_required(self, client, client_headers):
        response = client.post(URL, headers=client_headers, json={"projectDetails": {"title": ""}})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"]


@pytest.mark.api
class TestUpdateClientProject:

    def test_status_and_milestone_patch(self, client, db, seed_project, client_headers):
        seed_project(milestones=[{"id": "m1", "status": "pending", "title": "Design"}])

        response = client.patch(URL, headers=client_headers, json={
            "projectId": "p1",
            "status": "reviewed",
            "milestones": {"id": "m1", "status": "completed"},
        })

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Project updated successfully",
            "modifiedCount": 2,
        }
        stored = db[PROJECTS].find_one({"_id": "p1"})
        assert stored["status"] == "reviewed"
        assert stored["milestones"][0]["status"] == "completed"
        assert stored["milestones"][0]["title"] == "Design"

    def test_foreign_project_is_not_found(self, client, db, seed_project, other_client_headers):
        seed_project()

        response = client.patch(URL, headers=other_client_headers, json={"projectId": "p1", "progress": 50})

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Project not found"}
        assert db[PROJECTS].find_one({"_id": "p1"})["progress"] == 0

    def test_no_update_fields(self, client, seed_project, client_headers):
        seed_project()
        response = client.patch(URL, headers=client_headers, json={"projectId": "p1"})
        assert response.status_code == 400
        assert response.json()["message"] == "Project ID and at least one update field are required"

    def test_missing_project_id(self, client, client_headers):
        response = client.patch(URL, headers=client_headers, json={"status": "completed"})
        assert response.status_code == 400

    def test_progress_out_of_range(self, client, seed_project, client_headers):
        seed_project()
        response = client.patch(URL, headers=client_headers, json={"projectId": "p1", "progress": 150})
        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"] == ["progress"]

    def test_admin_updates_any_project(self, client, db, seed_project, admin_headers):
        seed_project(clientId="u2")
        response = client.patch(URL, headers=admin_headers, json={
            "projectId": "p1",
            "payments": [{"amount": 300, "method": "bank_transfer"}],
        })
        assert response.status_code == 200
        payments = db[PROJECTS].find_one({"_id": "p1"})["payments"]
        assert payments[0]["amount"] == 300

    def test_store_failure_is_reported(self, client, seed_project, client_headers, monkeypatch):
        from pymongo.errors import PyMongoError

        from app.services import project_reconciler

        seed_project()

        def broken(*args, **kwargs):
            raise PyMongoError("connection reset")

        monkeypatch.setattr(project_reconciler, "apply_update_plan", broken)
        response = client.patch(URL, headers=client_headers, json={"projectId": "p1", "progress": 10})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to update project",
            "error": "connection reset",
        }


@pytest.mark.api
class TestDeleteClientProject:

    def test_deletes_own_project(self, client, db, seed_project, client_headers):
        seed_project()

        response = client.request("DELETE", URL, headers=client_headers, json={"projectId": "p1"})

        assert response.status_code == 200
        assert response.json()["deletedCount"] == 1
        assert db[PROJECTS].find_one({"_id": "p1"}) is None
        assert db[USERS].find_one({"_id": "u1"})["projectsCount"] == 0

    def test_cannot_delete_foreign_project(self, client, db, seed_project, other_client_headers):
        seed_project()
        response = client.request("DELETE", URL, headers=other_client_headers, json={"projectId": "p1"})
        assert response.status_code == 404
        assert db[PROJECTS].find_one({"_id": "p1"}) is not None

    def test_project_id_required(self, client, client_headers):
        response = client.request("DELETE", URL, headers=client_headers, json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Project ID is required"
