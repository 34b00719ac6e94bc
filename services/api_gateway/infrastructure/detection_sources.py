"""Detection sources feeding the dispatcher: synthetic generator and replay log."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from libs.core.application.contracts import RandomSource
from libs.core.application.errors import SourceFailure
from libs.core.domain.entities import (
    DETECTION_TYPES,
    BoundingBox,
    RawDetectionEvent,
)

SYNTHETIC_MIN_CONFIDENCE = 0.7
SYNTHETIC_CONFIDENCE_SPAN = 0.3
FRAME_WIDTH = 300.0
FRAME_HEIGHT = 200.0
MIN_BOX_SIDE = 40.0
BOX_SIDE_SPAN = 60.0


class SyntheticDetectionSource:
    """Generates one random detection per tick from the registered feeds."""

    def __init__(
        self,
        feed_ids: Callable[[], list[str]],
        rng: RandomSource,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._feed_ids = feed_ids
        self._rng = rng
        self._clock = clock or _utc_now

    def next_event(self) -> RawDetectionEvent | None:
        feed_ids = self._feed_ids()
        if not feed_ids:
            raise SourceFailure("no feeds available for synthetic detections")

        feed_id = feed_ids[self._pick_index(len(feed_ids))]
        detection_type = DETECTION_TYPES[self._pick_index(len(DETECTION_TYPES))]
        confidence = SYNTHETIC_MIN_CONFIDENCE + (
            self._rng.random() * SYNTHETIC_CONFIDENCE_SPAN
        )
        position = BoundingBox(
            x=self._rng.random() * FRAME_WIDTH,
            y=self._rng.random() * FRAME_HEIGHT,
            width=MIN_BOX_SIDE + self._rng.random() * BOX_SIDE_SPAN,
            height=MIN_BOX_SIDE + self._rng.random() * BOX_SIDE_SPAN,
        )
        return RawDetectionEvent(
            feed_id=feed_id,
            detection_type=detection_type,
            confidence=confidence,
            position=position,
            timestamp=self._clock(),
        )

    def _pick_index(self, size: int) -> int:
        return min(int(self._rng.random() * size), size - 1)


class ReplayDetectionSource:
    """Replays raw detection events from a JSON-lines log, one per tick.

    Each line is an object with ``feed_id``, ``type``, ``confidence``,
    ``position`` (``x``, ``y``, ``width``, ``height``) and an optional ISO
    ``timestamp``. A malformed line fails its tick only; once the log is
    exhausted every tick yields nothing.
    """

    def __init__(self, lines: Iterable[str], name: str = "replay") -> None:
        self._lines = iter(lines)
        self._name = name
        self._line_no = 0
        self.exhausted = False

    def next_event(self) -> RawDetectionEvent | None:
        for line in self._lines:
            self._line_no += 1
            if not line.strip():
                continue
            try:
                return parse_raw_event(json.loads(line))
            except (ValueError, KeyError, TypeError) as error:
                raise SourceFailure(
                    f"{self._name}:{self._line_no}: invalid detection event: {error}"
                ) from error
        self.exhausted = True
        return None


def build_replay_source(path: str) -> ReplayDetectionSource:
    """Validate the log path and create a replay source over it."""
    log_path = Path(path)
    if not log_path.is_file():
        raise ValueError(f"replay log not found: {log_path}")
    lines = log_path.read_text(encoding="utf-8").splitlines()
    return ReplayDetectionSource(lines=lines, name=log_path.name)


def parse_raw_event(payload: dict[str, object]) -> RawDetectionEvent:
    position = payload.get("position") or {}
    if not isinstance(position, dict):
        raise TypeError("position must be an object")

    raw_ts = payload.get("timestamp")
    timestamp = datetime.fromisoformat(str(raw_ts)) if raw_ts else _utc_now()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return RawDetectionEvent(
        feed_id=str(payload["feed_id"]),
        detection_type=payload["type"],  # type: ignore[arg-type]
        confidence=float(payload["confidence"]),  # type: ignore[arg-type]
        position=BoundingBox(
            x=float(position.get("x", 0.0)),
            y=float(position.get("y", 0.0)),
            width=float(position.get("width", 0.0)),
            height=float(position.get("height", 0.0)),
        ),
        timestamp=timestamp,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
