"""Tests for probes, Prometheus exposition and service info."""

import tickphysics.api.system as system


class TestProbes:
    def test_liveness(self, client):
        resp = client.get("/health/live")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_readiness(self, client):
        resp = client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ready", "db": "ok"}

    def test_readiness_degraded(self, client, monkeypatch):
        monkeypatch.setattr(system, "db_healthcheck", lambda: False)
        resp = client.get("/health/ready")
        assert resp.status_code == 503
        assert resp.json() == {"status": "degraded", "db": "error"}

    def test_liveness_ignores_db(self, client, monkeypatch):
        monkeypatch.setattr(system, "db_healthcheck", lambda: False)
        assert client.get("/health/live").status_code == 200


class TestMetrics:
    def test_exposition_format(self, client):
        client.get("/health/live")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in resp.text
        assert "http_request_duration_seconds" in resp.text

    def test_route_template_label(self, client):
        client.get("/api/v1/symbols/12345")
        text = client.get("/metrics").text
        assert 'path="/api/v1/symbols/{symbol_id}"' in text

    def test_unmatched_paths_share_one_label(self, client):
        client.get("/wp-admin/setup-config.php")
        text = client.get("/metrics").text
        assert 'path="unmatched"' in text
        assert "wp-admin" not in text


def test_system_info(client):
    body = client.get("/api/v1/system/info").json()
    assert body["db"] == "ok"
    assert body["version"]
    assert "service" in body
