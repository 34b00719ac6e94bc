"""Operator control API tests."""

from datetime import datetime, timezone

from fastapi.testclient import TestClient

from libs.core.domain.entities import BoundingBox, RawDetectionEvent
from services.api_gateway import dependencies
from services.api_gateway.app import app
from services.api_gateway.dependencies import get_surveillance_service, reset_state

client = TestClient(app)


def setup_function() -> None:
    reset_state()


def teardown_module() -> None:
    dependencies.surveillance_service.stop()


def _submit(feed_id: str, detection_type: str, confidence: float = 0.9) -> None:
    get_surveillance_service().submit_event(
        RawDetectionEvent(
            feed_id=feed_id,
            detection_type=detection_type,  # type: ignore[arg-type]
            confidence=confidence,
            position=BoundingBox(x=10.0, y=20.0, width=50.0, height=80.0),
            timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
    )


def test_list_feeds_returns_roster() -> None:
    response = client.get("/v1/feeds")

    assert response.status_code == 200
    payload = response.json()
    assert [feed["feed_id"] for feed in payload] == ["feed1", "feed2", "feed3", "feed4"]
    assert payload[1]["name"] == "Parking Lot"
    assert payload[2]["kind"] == "Drone"


def test_select_feed_includes_recent_detections() -> None:
    _submit("feed4", "animal", 0.75)

    response = client.get("/v1/feeds/feed4")

    assert response.status_code == 200
    detections = response.json()["detections"]
    assert len(detections) == 1
    assert detections[0]["type"] == "animal"
    assert detections[0]["threat_level"] == "Low"
    assert detections[0]["position"] == {
        "x": 10.0,
        "y": 20.0,
        "width": 50.0,
        "height": 80.0,
    }


def test_select_unknown_feed_returns_404() -> None:
    response = client.get("/v1/feeds/feed404")

    assert response.status_code == 404
    assert response.json()["detail"] == "Feed not found"


def test_set_feed_status_flow() -> None:
    first = client.post("/v1/feeds/feed3/status", json={"status": "Inactive"})
    second = client.post("/v1/feeds/feed3/status", json={"status": "Inactive"})
    missing = client.post("/v1/feeds/nope/status", json={"status": "Active"})
    invalid = client.post("/v1/feeds/feed3/status", json={"status": "Broken"})

    assert first.status_code == 200
    assert first.json()["status"] == "Inactive"
    assert second.json() == first.json()
    assert missing.status_code == 404
    assert invalid.status_code == 422


def test_drone_detection_creates_alert() -> None:
    _submit("feed3", "drone")

    response = client.get("/v1/alerts")

    assert response.status_code == 200
    alerts = response.json()
    assert len(alerts) == 1
    assert alerts[0]["message"].endswith("threat detected: drone at Perimeter North")
    assert alerts[0]["acknowledged"] is False
    assert alerts[0]["detection"]["feed_id"] == "feed3"

    details = client.get(f"/v1/alerts/{alerts[0]['alert_id']}")
    assert details.status_code == 200
    assert details.json() == alerts[0]


def test_acknowledge_alert_flow() -> None:
    _submit("feed3", "drone")
    _submit("feed3", "drone")
    alert_id = client.get("/v1/alerts").json()[0]["alert_id"]

    first = client.post(f"/v1/alerts/{alert_id}/acknowledge")
    second = client.post(f"/v1/alerts/{alert_id}/acknowledge")
    pending = client.get("/v1/alerts?unacknowledged=true")

    assert first.status_code == 200
    assert first.json()["acknowledged"] is True
    assert second.json() == first.json()
    assert len(pending.json()) == 1
    assert pending.json()[0]["alert_id"] != alert_id


def test_acknowledge_unknown_alert_has_no_side_effects() -> None:
    _submit("feed3", "drone")
    alerts_before = client.get("/v1/alerts").json()
    stats_before = client.get("/v1/stats").json()

    response = client.post("/v1/alerts/nonexistent/acknowledge")

    assert response.status_code == 404
    assert response.json()["detail"] == "Alert not found"
    assert client.get("/v1/alerts").json() == alerts_before
    assert client.get("/v1/stats").json() == stats_before


def test_stats_count_processed_detections() -> None:
    _submit("feed2", "vehicle", 0.95)
    _submit("feed1", "animal", 0.8)
    _submit("feed404", "drone")

    response = client.get("/v1/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total_detections": 2,
        "high_threat_alerts": 0,
        "false_alarm_rate": 12.0,
        "system_uptime": "99.8%",
    }
    assert client.get("/v1/alerts").json() == []


def test_configure_stats_display_metrics() -> None:
    response = client.put(
        "/v1/stats/config",
        json={"false_alarm_rate": 4.5, "system_uptime": "99.9%"},
    )
    invalid = client.put("/v1/stats/config", json={"false_alarm_rate": 150.0})

    assert response.status_code == 200
    assert response.json()["false_alarm_rate"] == 4.5
    assert response.json()["system_uptime"] == "99.9%"
    assert response.json()["total_detections"] == 0
    assert invalid.status_code == 422


def test_pause_and_resume_dispatcher() -> None:
    initial = client.get("/v1/dispatcher")
    paused = client.post("/v1/dispatcher/pause")
    paused_again = client.post("/v1/dispatcher/pause")
    resumed = client.post("/v1/dispatcher/resume")

    assert initial.json() == {"state": "running", "alive": False}
    assert paused.json()["state"] == "paused"
    assert paused_again.json()["state"] == "paused"
    assert resumed.json()["state"] == "running"
