"""
Tests for version endpoint
"""
from fastapi import status


def test_version_endpoint_returns_version(client):
    """Test that version endpoint returns service and version information"""
    response = client.get("/api/v1/version")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["service"] == "leave-ledger-backend"
    assert "version" in data
    assert data["env"] in ["local", "staging", "prod"]


def test_version_endpoint_reports_calendar(client):
    calendar = client.get("/api/v1/version").json()["calendar"]

    assert calendar["timezone"] == "UTC"
    assert calendar["workday_start_hour"] == 9
    assert calendar["workday_end_hour"] == 17
    assert calendar["working_weekdays"] == [0, 1, 2, 3, 4]
