from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import structlog

from libs.core.application.errors import UnknownFeedError
from libs.core.domain.entities import Detection, Feed, FeedKind, FeedStatus

logger = structlog.get_logger(__name__)

FEED_HISTORY_CAPACITY = 5


@dataclass(frozen=True)
class FeedDefinition:
    """Static roster entry used to seed the registry."""

    feed_id: str
    name: str
    location: str
    kind: FeedKind
    status: FeedStatus = "Active"


DEFAULT_ROSTER: tuple[FeedDefinition, ...] = (
    FeedDefinition("feed1", "Main Entrance", "Building A", "CCTV"),
    FeedDefinition("feed2", "Parking Lot", "Parking Zone B", "CCTV"),
    FeedDefinition("feed3", "Perimeter North", "Sector 1", "Drone"),
    FeedDefinition("feed4", "Warehouse", "Building C", "CCTV"),
)


@dataclass
class _FeedRecord:
    definition: FeedDefinition
    status: FeedStatus
    history: deque[Detection] = field(default_factory=deque)

    def snapshot(self) -> Feed:
        return Feed(
            feed_id=self.definition.feed_id,
            name=self.definition.name,
            location=self.definition.location,
            kind=self.definition.kind,
            status=self.status,
            detections=tuple(self.history),
        )


class FeedRegistry:
    """Owns the monitored feeds and their bounded detection history."""

    def __init__(
        self,
        roster: tuple[FeedDefinition, ...] = DEFAULT_ROSTER,
        history_capacity: int = FEED_HISTORY_CAPACITY,
    ) -> None:
        if history_capacity < 1:
            raise ValueError("history capacity must be positive")
        self._feeds: dict[str, _FeedRecord] = {}
        for definition in roster:
            if definition.feed_id in self._feeds:
                raise ValueError(f"Duplicate feed id: {definition.feed_id}")
            self._feeds[definition.feed_id] = _FeedRecord(
                definition=definition,
                status=definition.status,
                history=deque(maxlen=history_capacity),
            )

    def append_detection(self, feed_id: str, detection: Detection) -> None:
        # deque(maxlen) evicts the oldest entry as part of the append
        self._require(feed_id).history.append(detection)

    def set_status(self, feed_id: str, status: FeedStatus) -> Feed:
        record = self._require(feed_id)
        if record.status != status:
            logger.info(
                "feed_status_changed",
                feed_id=feed_id,
                previous=record.status,
                status=status,
            )
            record.status = status
        return record.snapshot()

    def get(self, feed_id: str) -> Feed:
        return self._require(feed_id).snapshot()

    def list(self) -> list[Feed]:
        return [record.snapshot() for record in self._feeds.values()]

    def feed_ids(self) -> list[str]:
        return list(self._feeds)

    def _require(self, feed_id: str) -> _FeedRecord:
        record = self._feeds.get(feed_id)
        if record is None:
            raise UnknownFeedError(feed_id)
        return record
