"""Tests for attaching uploaded files to projects."""
import pytest

from app.db.session import PROJECTS

URL = "/api/v1/client-projects/files"


@pytest.mark.api
class TestProjectFileUpload:

    def test_upload_is_saved_and_appended(self, client, db, seed_project, client_headers, uploads_dir):
        seed_project(files=[{"id": "f0", "fileName": "brief.txt", "fileUrl": "/uploads/brief.txt"}])

        response = client.post(
            URL,
            headers=client_headers,
            data={"projectId": "p1"},
            files={"file": ("Scope v2.pdf", b"%PDF-1.4 scope", "application/pdf")},
        )

        assert response.status_code == 200
        entry = response.json()["file"]
        assert entry["fileName"] == "Scope v2.pdf"
        assert entry["fileSize"] == len(b"%PDF-1.4 scope")
        assert entry["fileType"] == "application/pdf"
        assert entry["fileUrl"].startswith("/uploads/")
        assert entry["fileUrl"].endswith("_Scope_v2.pdf")

        saved = list(uploads_dir.rglob("*_Scope_v2.pdf"))
        assert len(saved) == 1
        assert saved[0].read_bytes() == b"%PDF-1.4 scope"

        files = db[PROJECTS].find_one({"_id": "p1"})["files"]
        assert [f["fileName"] for f in files] == ["brief.txt", "Scope v2.pdf"]

    def test_missing_file(self, client, seed_project, client_headers, uploads_dir):
        seed_project()
        response = client.post(URL, headers=client_headers, data={"projectId": "p1"})
        assert response.status_code == 400
        assert response.json()["message"] == "File and projectId are required"

    def test_foreign_project(self, client, seed_project, other_client_headers, uploads_dir):
        seed_project()
        response = client.post(
            URL,
            headers=other_client_headers,
            data={"projectId": "p1"},
            files={"file": ("notes.txt", b"hi", "text/plain")},
        )
        assert response.status_code == 404
        assert list(uploads_dir.rglob("*")) == []

    def test_saved_file_removed_when_project_vanishes(self, client, db, seed_project, client_headers,
                                                       uploads_dir, monkeypatch):
        from app.services import project_service

        seed_project()
        # lookup succeeds, but the project is gone by the time the entry is pushed
        monkeypatch.setattr(project_service, "find_accessible_project",
                            lambda db, account, project_id: {"_id": "deleted-meanwhile"})

        response = client.post(
            URL,
            headers=client_headers,
            data={"projectId": "p1"},
            files={"file": ("plan.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 404
        assert [p for p in uploads_dir.rglob("*") if p.is_file()] == []

    def test_saved_file_removed_when_store_write_fails(self, client, db, seed_project, client_headers,
                                                        uploads_dir, monkeypatch):
        from pymongo.errors import PyMongoError

        seed_project()

        def broken(*args, **kwargs):
            raise PyMongoError("not primary")

        monkeypatch.setattr(type(db[PROJECTS]), "update_one", broken)

        response = client.post(
            URL,
            headers=client_headers,
            data={"projectId": "p1"},
            files={"file": ("plan.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to upload file"
        assert [p for p in uploads_dir.rglob("*") if p.is_file()] == []
