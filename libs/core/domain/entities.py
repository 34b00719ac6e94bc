from dataclasses import dataclass
from datetime import datetime
from typing import Literal

DetectionType = Literal["human", "vehicle", "animal", "drone"]
ThreatLevel = Literal["Low", "Medium", "High"]
FeedKind = Literal["CCTV", "Drone"]
FeedStatus = Literal["Active", "Inactive"]

DETECTION_TYPES: tuple[DetectionType, ...] = ("human", "vehicle", "animal", "drone")
FEED_STATUSES: tuple[FeedStatus, ...] = ("Active", "Inactive")


@dataclass(frozen=True)
class BoundingBox:
    """Descriptive detection position inside the feed frame."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if min(self.x, self.y, self.width, self.height) < 0:
            raise ValueError("bounding box values must be non-negative")


@dataclass(frozen=True)
class RawDetectionEvent:
    """Unclassified event emitted by a detection source."""

    feed_id: str
    detection_type: DetectionType
    confidence: float
    position: BoundingBox
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.detection_type not in DETECTION_TYPES:
            raise ValueError(f"unknown detection type: {self.detection_type}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")


@dataclass(frozen=True)
class Detection:
    """Classified observation stored in feed history and embedded in alerts."""

    detection_id: str
    detection_type: DetectionType
    confidence: float
    position: BoundingBox
    timestamp: datetime
    threat_level: ThreatLevel
    feed_id: str


@dataclass(frozen=True)
class Feed:
    """Read-only feed snapshot."""

    feed_id: str
    name: str
    location: str
    kind: FeedKind
    status: FeedStatus
    detections: tuple[Detection, ...] = ()


@dataclass
class Alert:
    """Operator-facing alert raised for a Medium or High detection."""

    alert_id: str
    detection: Detection
    message: str
    recommendation: str
    timestamp: datetime
    acknowledged: bool = False


@dataclass(frozen=True)
class Stats:
    """Stats snapshot shown on the operator dashboard."""

    total_detections: int
    high_threat_alerts: int
    false_alarm_rate: float
    system_uptime: str
