import pytest
from unittest.mock import MagicMock

from app.database import get_db
from app.services.error_sink import DatabaseErrorSink, ErrorContext
from main import app


@pytest.fixture
def recorded_errors(session_factory):
    sink = DatabaseErrorSink(session_factory)
    for n in range(3):
        sink.record(RuntimeError(f"failure {n}"), ErrorContext(endpoint=f"/api/data/{n}", method="GET"))


class TestListErrorLogs:

    ENDPOINT = "/api/error-logs"

    def test_empty(self, client):
        data = client.get(self.ENDPOINT).json()
        assert data["logs"] == []
        assert data["pagination"] == {"totalCount": 0, "page": 1, "pageSize": 20, "totalPages": 0}

    def test_most_recent_first(self, client, recorded_errors):
        logs = client.get(self.ENDPOINT).json()["logs"]
        assert [log["message"] for log in logs] == ["failure 2", "failure 1", "failure 0"]
        assert logs[0]["endpoint"] == "/api/data/2"
        assert "_id" in logs[0]

    def test_paginated(self, client, recorded_errors):
        data = client.get(self.ENDPOINT, params={"page": 2, "pageSize": 2}).json()
        assert [log["message"] for log in data["logs"]] == ["failure 0"]
        assert data["pagination"] == {"totalCount": 3, "page": 2, "pageSize": 2, "totalPages": 2}

    def test_date_bounds(self, client, recorded_errors):
        future = client.get(self.ENDPOINT, params={"startDate": "2999-01-01"}).json()
        assert future["pagination"]["totalCount"] == 0

        past = client.get(self.ENDPOINT, params={"endDate": "2000-01-01T00:00:00Z"}).json()
        assert past["pagination"]["totalCount"] == 0

        window = client.get(self.ENDPOINT, params={"startDate": "2000-01-01", "endDate": "2999-01-01"}).json()
        assert window["pagination"]["totalCount"] == 3

    def test_unreadable_dates_are_ignored(self, client, recorded_errors):
        data = client.get(self.ENDPOINT, params={"startDate": "yesterday"}).json()
        assert data["pagination"]["totalCount"] == 3

    def test_failure_returns_error(self, client):
        broken = MagicMock()
        broken.query.side_effect = RuntimeError("db down")
        app.dependency_overrides[get_db] = lambda: broken

        response = client.get(self.ENDPOINT)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to retrieve error logs"}


class TestClearErrorLogs:

    ENDPOINT = "/api/error-logs"

    def test_clear_before_keeps_newer_logs(self, client, recorded_errors):
        data = client.delete(self.ENDPOINT, params={"before": "2000-01-01"}).json()
        assert data == {"success": True, "deleted": 0, "message": "Successfully deleted 0 error logs"}
        assert client.get(self.ENDPOINT).json()["pagination"]["totalCount"] == 3

    def test_clear_all(self, client, recorded_errors):
        data = client.delete(self.ENDPOINT).json()
        assert data["deleted"] == 3
        assert client.get(self.ENDPOINT).json()["logs"] == []

    def test_unreadable_cutoff_is_rejected(self, client, recorded_errors):
        response = client.delete(self.ENDPOINT, params={"before": "last week"})
        assert response.status_code == 400
        assert client.get(self.ENDPOINT).json()["pagination"]["totalCount"] == 3

    def test_failure_returns_error(self, client):
        broken = MagicMock()
        broken.query.side_effect = RuntimeError("db down")
        app.dependency_overrides[get_db] = lambda: broken

        response = client.delete(self.ENDPOINT)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to clear error logs"}
