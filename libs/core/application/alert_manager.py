from __future__ import annotations

from collections import deque
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

import structlog

from libs.core.application.errors import UnknownAlertError
from libs.core.domain.entities import Alert, Detection, DetectionType, ThreatLevel

logger = structlog.get_logger(__name__)

ALERT_QUEUE_CAPACITY = 10
ALERTING_LEVELS: frozenset[ThreatLevel] = frozenset({"Medium", "High"})

RECOMMENDATIONS: dict[tuple[DetectionType, ThreatLevel], str] = {
    ("human", "High"): (
        "Dispatch security personnel immediately. Verify identity and intent."
    ),
    ("human", "Medium"): (
        "Monitor closely. Prepare security response if behavior escalates."
    ),
    ("vehicle", "High"): "Block access routes. Verify authorization immediately.",
    ("vehicle", "Medium"): "Check vehicle registration. Monitor movement patterns.",
    ("animal", "High"): "Contact animal control. Ensure personnel safety.",
    ("animal", "Medium"): "Monitor animal behavior. Clear area if aggressive.",
    ("drone", "High"): "Activate counter-drone measures. Alert aviation authorities.",
    ("drone", "Medium"): "Track drone path. Attempt identification of operator.",
}


class AlertManager:
    """Builds alerts for Medium/High detections and keeps the bounded queue.

    The queue is ordered most-recent-first. Once it is full, every new alert
    drops the oldest one whether or not an operator acknowledged it.
    """

    def __init__(
        self,
        capacity: int = ALERT_QUEUE_CAPACITY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("alert queue capacity must be positive")
        self._queue: deque[Alert] = deque(maxlen=capacity)
        self._clock = clock or _utc_now

    def maybe_alert(self, detection: Detection, feed_name: str) -> Alert | None:
        if detection.threat_level not in ALERTING_LEVELS:
            return None
        recommendation = RECOMMENDATIONS[
            (detection.detection_type, detection.threat_level)
        ]

        alert = Alert(
            alert_id=f"alert_{uuid4().hex}",
            detection=detection,
            message=(
                f"{detection.threat_level} threat detected: "
                f"{detection.detection_type} at {feed_name}"
            ),
            recommendation=recommendation,
            timestamp=self._clock(),
        )
        self._enqueue(alert)
        logger.info(
            "alert_created",
            alert_id=alert.alert_id,
            detection_id=detection.detection_id,
            feed_id=detection.feed_id,
            threat_level=detection.threat_level,
        )
        return replace(alert)

    def acknowledge(self, alert_id: str) -> Alert:
        for alert in self._queue:
            if alert.alert_id != alert_id:
                continue
            if not alert.acknowledged:
                alert.acknowledged = True
                logger.info("alert_acknowledged", alert_id=alert_id)
            return replace(alert)
        raise UnknownAlertError(alert_id)

    def get(self, alert_id: str) -> Alert | None:
        for alert in self._queue:
            if alert.alert_id == alert_id:
                return replace(alert)
        return None

    def list_all(self) -> list[Alert]:
        return [replace(alert) for alert in self._queue]

    def list_unacknowledged(self) -> list[Alert]:
        return [replace(alert) for alert in self._queue if not alert.acknowledged]

    def _enqueue(self, alert: Alert) -> None:
        if len(self._queue) == self._queue.maxlen:
            evicted = self._queue[-1]
            if not evicted.acknowledged:
                logger.warning(
                    "unacknowledged_alert_evicted",
                    alert_id=evicted.alert_id,
                    threat_level=evicted.detection.threat_level,
                )
        self._queue.appendleft(alert)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
