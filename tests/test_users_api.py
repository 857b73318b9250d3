"""Tests for the admin account management endpoints."""
import bcrypt
import pytest
from bson import ObjectId

from app.db.session import USERS

URL = "/api/v1/users"


@pytest.mark.api
class TestUsersAPI:

    def test_list_hides_passwords(self, client, db, admin_headers):
        db[USERS].update_one({"_id": "u1"}, {"$set": {"password": "hash"}})

        response = client.get(URL, headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert all("password" not in user for user in body["users"])
        other = next(user for user in body["users"] if user["email"] == "other@example.com")
        assert (other["firstName"], other["lastName"]) == ("Otto", "Other")

    def test_clients_cannot_manage_users(self, client, client_headers):
        assert client.get(URL, headers=client_headers).status_code == 403

    def test_create_hashes_password(self, client, db, admin_headers):
        response = client.post(URL, headers=admin_headers, json={
            "email": " New.Dev@Example.com ",
            "password": "s3cret!",
            "role": "developer",
            "name": "New Dev",
        })

        assert response.status_code == 201
        assert "password" not in response.json()["user"]
        stored = db[USERS].find_one({"email": "new.dev@example.com"})
        assert stored["isActive"] is True
        assert bcrypt.checkpw(b"s3cret!", stored["password"].encode())

    def test_create_collects_all_errors(self, client, admin_headers):
        response = client.post(URL, headers=admin_headers, json={"email": "bad", "password": "123"})
        assert response.status_code == 400
        assert response.json()["errors"] == [
            "Invalid email format",
            "Password must be at least 6 characters",
            "Role is required",
        ]

    def test_create_duplicate_email(self, client, admin_headers):
        response = client.post(URL, headers=admin_headers, json={"email": "client@example.com", "role": "client"})
        assert response.status_code == 409

    def test_update_fields(self, client, db, admin_headers):
        user_id = db[USERS].insert_one({"email": "dev@example.com", "role": "developer", "isActive": True}).inserted_id

        response = client.patch(URL, headers=admin_headers, json={
            "_id": str(user_id), "isActive": False, "company": "  Acme  ",
        })

        assert response.status_code == 200
        stored = db[USERS].find_one({"_id": user_id})
        assert stored["isActive"] is False
        assert stored["company"] == "Acme"

    def test_update_rejects_taken_email(self, client, db, admin_headers):
        user_id = db[USERS].insert_one({"email": "dev@example.com", "role": "developer"}).inserted_id
        response = client.patch(URL, headers=admin_headers, json={"_id": str(user_id), "email": "client@example.com"})
        assert response.status_code == 409

    def test_update_unknown_user(self, client, admin_headers):
        response = client.patch(URL, headers=admin_headers, json={"_id": str(ObjectId()), "role": "client"})
        assert response.status_code == 404

    def test_delete_user(self, client, db, admin_headers):
        user_id = db[USERS].insert_one({"email": "dev@example.com", "role": "developer"}).inserted_id
        response = client.delete(URL, headers=admin_headers, params={"id": str(user_id)})
        assert response.status_code == 200
        assert db[USERS].find_one({"_id": user_id}) is None

    def test_admin_cannot_delete_themselves(self, client, db, admin_headers):
        admin = db[USERS].find_one({"email": "admin@example.com"})
        response = client.delete(URL, headers=admin_headers, params={"id": str(admin["_id"])})
        assert response.status_code == 400
        assert response.json()["message"] == "Users cannot delete themselves"

    def test_delete_invalid_id(self, client, admin_headers):
        response = client.delete(URL, headers=admin_headers, params={"id": "u1"})
        assert response.status_code == 400
