"""
Tests for the Flask HTTP API.
"""

import io

import pytest


class TestUploadRoutes:
    """Test suite for upload endpoints."""

    def test_upload_json(self, client, sample_logs):
        response = client.post("/api/logs/upload", json={"content": sample_logs})

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["count"] == 4

    def test_upload_json_missing_content(self, client):
        response = client.post("/api/logs/upload", json={})

        assert response.status_code == 400
        body = response.get_json()
        assert body["success"] is False
        assert body["error"] == "No log content provided"

    def test_upload_file(self, client, sample_logs):
        data = {"file": (io.BytesIO(sample_logs.encode("utf-8")), "fleet.log")}

        response = client.post("/api/logs/upload-file", data=data, content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.get_json()["count"] == 4

    def test_upload_file_missing(self, client):
        response = client.post("/api/logs/upload-file", data={}, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json()["error"] == "No file uploaded"

    def test_upload_file_wrong_type(self, client):
        data = {"file": (io.BytesIO(b"a,b,c"), "fleet.csv")}

        response = client.post("/api/logs/upload-file", data=data, content_type="multipart/form-data")

        assert response.status_code == 400

    def test_upload_file_over_limit(self, app, client):
        app.config["MAX_CONTENT_LENGTH"] = 1024
        data = {"file": (io.BytesIO(b"x" * 4096), "fleet.txt")}

        response = client.post("/api/logs/upload-file", data=data, content_type="multipart/form-data")

        assert response.status_code == 413
        assert response.get_json()["success"] is False

    def test_webhook_plain_text(self, client, sample_logs):
        response = client.post("/api/logs/webhook", data=sample_logs, content_type="text/plain")

        assert response.status_code == 200
        assert response.get_json()["count"] == 4

    def test_webhook_json(self, client, sample_logs):
        response = client.post("/api/logs/webhook", json={"content": sample_logs})

        assert response.status_code == 200
        assert response.get_json()["count"] == 4

    def test_webhook_empty_body(self, client):
        response = client.post("/api/logs/webhook", data="", content_type="text/plain")

        assert response.status_code == 400


class TestQueryRoutes:
    """Test suite for read endpoints."""

    @pytest.fixture(autouse=True)
    def _upload(self, client, sample_logs):
        client.post("/api/logs/upload", json={"content": sample_logs})

    def test_search(self, client):
        response = client.get("/api/logs?vehicle=1234&level=ERROR")

        body = response.get_json()
        assert response.status_code == 200
        assert body["count"] == 1
        assert body["data"][0]["code"] == "U0420"

    def test_search_by_date(self, client):
        response = client.get("/api/logs?from=2025-07-25")

        assert [item["code"] for item in response.get_json()["data"]] == ["B1000"]

    def test_search_bad_vehicle(self, client):
        response = client.get("/api/logs?vehicle=abc")

        assert response.status_code == 400
        assert response.get_json()["error"] == "Vehicle ID must be a valid number"

    def test_all_logs(self, client):
        body = client.get("/api/logs/all").get_json()

        assert body["count"] == 4
        assert body["data"][0]["timestamp"] == "2025-07-25T09:00:00.000Z"

    def test_count(self, client):
        assert client.get("/api/logs/count").get_json()["count"] == 4

    def test_export(self, client):
        response = client.get("/api/logs/export?vehicle=5678")

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "attachment" in response.headers["Content-Disposition"]
        lines = response.get_data(as_text=True).strip().split("\n")
        assert len(lines) == 3

    def test_vehicles(self, client):
        assert client.get("/api/vehicles").get_json()["data"] == [1234, 5678]

    def test_fleet_stats(self, client):
        body = client.get("/api/vehicles/stats").get_json()

        assert [s["vehicleId"] for s in body["data"]] == [1234, 5678]

    def test_vehicle_stats(self, client):
        body = client.get("/api/vehicles/1234/stats").get_json()

        assert body["data"]["errorCount"] == 1
        assert body["data"]["warningCount"] == 1

    def test_vehicle_stats_bad_id(self, client):
        assert client.get("/api/vehicles/abc/stats").status_code == 400

    def test_info(self, client):
        body = client.get("/api/info").get_json()

        assert body["data"]["totalLogs"] == 4

    def test_code_info(self, client):
        body = client.get("/api/codes/C0005").get_json()

        assert body["data"]["category"] == "chassis"
        assert body["data"]["level"] == "ERROR"

    def test_clear(self, client):
        response = client.delete("/api/logs")

        assert response.status_code == 200
        assert client.get("/api/logs/count").get_json()["count"] == 0


class TestMiscRoutes:
    """Tests for health, CORS and unknown routes."""

    def test_health(self, client):
        response = client.get("/api/health")

        body = response.get_json()
        assert response.status_code == 200
        assert {c["name"] for c in body["components"]} == {"storage", "configuration"}
        assert body["status"] == "healthy"

    def test_cors_header(self, client, settings):
        response = client.get("/api/logs/count")

        assert response.headers["Access-Control-Allow-Origin"] == settings.cors_origin

    def test_unknown_route(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.get_json()["success"] is False
