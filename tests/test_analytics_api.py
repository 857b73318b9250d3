"""Tests for the admin analytics endpoint."""
import pytest


@pytest.mark.api
def test_totals_fold_both_status_vocabularies(client, seed_project, admin_headers):
    seed_project(_id="p1", status="reviewed", payments=[{"amount": 100}, {"amount": 50.5}])
    seed_project(_id="p2", status="in_progress", payments=[{"amount": 20}])
    seed_project(_id="p3", status="rejected")

    response = client.get("/api/v1/analytics", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["totalProjects"] == 3
    assert body["totalUsers"] == 3
    assert body["totalRevenue"] == 170.5
    assert body["projectsByStatus"] == {"reviewed": 1, "in_progress": 1, "rejected": 1}
    assert body["projectsByCanonicalStatus"] == {"in_progress": 2, "cancelled": 1}
    assert body["usersByRole"] == {"admin": 1, "client": 2}


@pytest.mark.api
def test_requires_admin(client, client_headers):
    response = client.get("/api/v1/analytics", headers=client_headers)
    assert response.status_code == 403
