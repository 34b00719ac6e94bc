from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from libs.core.application.errors import UnknownAlertError, UnknownFeedError
from libs.core.application.surveillance_service import SurveillanceService
from libs.core.domain.entities import Alert, Detection, Feed, FeedStatus, Stats
from services.api_gateway.dependencies import get_surveillance_service

router = APIRouter()


class FeedStatusRequest(BaseModel):
    status: FeedStatus


class StatsConfigRequest(BaseModel):
    false_alarm_rate: float | None = Field(default=None, ge=0.0, le=100.0)
    system_uptime: str | None = None


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
def ready() -> dict[str, str]:
    return {"status": "ready"}


@router.get("/version")
def version() -> dict[str, str]:
    return {"version": "0.1.0"}


@router.get("/v1/dispatcher")
def get_dispatcher_state() -> dict[str, object]:
    service = get_surveillance_service()
    return _dispatcher_to_dict(service)


@router.post("/v1/dispatcher/pause")
def pause_dispatcher() -> dict[str, object]:
    service = get_surveillance_service()
    service.pause()
    return _dispatcher_to_dict(service)


@router.post("/v1/dispatcher/resume")
def resume_dispatcher() -> dict[str, object]:
    service = get_surveillance_service()
    service.resume()
    return _dispatcher_to_dict(service)


@router.get("/v1/feeds")
def get_feeds() -> list[dict[str, object]]:
    service = get_surveillance_service()
    return [_feed_to_dict(feed) for feed in service.list_feeds()]


@router.get("/v1/feeds/{feed_id}")
def get_feed(feed_id: str) -> dict[str, object]:
    service = get_surveillance_service()
    feed = service.select_feed(feed_id)
    if feed is None:
        raise HTTPException(status_code=404, detail="Feed not found")
    return _feed_to_dict(feed)


@router.post("/v1/feeds/{feed_id}/status")
def set_feed_status(feed_id: str, payload: FeedStatusRequest) -> dict[str, object]:
    service = get_surveillance_service()
    try:
        feed = service.set_feed_status(feed_id, payload.status)
    except UnknownFeedError as error:
        raise HTTPException(status_code=404, detail="Feed not found") from error
    return _feed_to_dict(feed)


@router.get("/v1/alerts")
def get_alerts(unacknowledged: bool = False) -> list[dict[str, object]]:
    service = get_surveillance_service()
    alerts = service.list_alerts(unacknowledged_only=unacknowledged)
    return [_alert_to_dict(alert) for alert in alerts]


@router.get("/v1/alerts/{alert_id}")
def get_alert_details(alert_id: str) -> dict[str, object]:
    service = get_surveillance_service()
    alert = service.get_alert(alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return _alert_to_dict(alert)


@router.post("/v1/alerts/{alert_id}/acknowledge")
def acknowledge_alert(alert_id: str) -> dict[str, object]:
    service = get_surveillance_service()
    try:
        alert = service.acknowledge_alert(alert_id)
    except UnknownAlertError as error:
        raise HTTPException(status_code=404, detail="Alert not found") from error
    return _alert_to_dict(alert)


@router.get("/v1/stats")
def get_stats() -> dict[str, object]:
    service = get_surveillance_service()
    return _stats_to_dict(service.get_stats())


@router.put("/v1/stats/config")
def configure_stats(payload: StatsConfigRequest) -> dict[str, object]:
    service = get_surveillance_service()
    stats = service.configure_stats(
        false_alarm_rate=payload.false_alarm_rate,
        system_uptime=payload.system_uptime,
    )
    return _stats_to_dict(stats)


def _dispatcher_to_dict(service: SurveillanceService) -> dict[str, object]:
    return {
        "state": service.dispatcher_state(),
        "alive": service.dispatcher_alive(),
    }


def _detection_to_dict(detection: Detection) -> dict[str, object]:
    return {
        "detection_id": detection.detection_id,
        "type": detection.detection_type,
        "confidence": detection.confidence,
        "position": {
            "x": detection.position.x,
            "y": detection.position.y,
            "width": detection.position.width,
            "height": detection.position.height,
        },
        "timestamp": detection.timestamp.isoformat(),
        "threat_level": detection.threat_level,
        "feed_id": detection.feed_id,
    }


def _feed_to_dict(feed: Feed) -> dict[str, object]:
    return {
        "feed_id": feed.feed_id,
        "name": feed.name,
        "location": feed.location,
        "kind": feed.kind,
        "status": feed.status,
        "detections": [_detection_to_dict(item) for item in feed.detections],
    }


def _alert_to_dict(alert: Alert) -> dict[str, object]:
    return {
        "alert_id": alert.alert_id,
        "message": alert.message,
        "recommendation": alert.recommendation,
        "acknowledged": alert.acknowledged,
        "timestamp": alert.timestamp.isoformat(),
        "detection": _detection_to_dict(alert.detection),
    }


def _stats_to_dict(stats: Stats) -> dict[str, object]:
    return {
        "total_detections": stats.total_detections,
        "high_threat_alerts": stats.high_threat_alerts,
        "false_alarm_rate": stats.false_alarm_rate,
        "system_uptime": stats.system_uptime,
    }
