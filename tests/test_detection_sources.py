"""Synthetic and replay detection source tests."""

import json
import random
from datetime import datetime, timezone
from pathlib import Path

import pytest

from libs.core.application.errors import SourceFailure
from libs.core.domain.entities import DETECTION_TYPES
from services.api_gateway.infrastructure.detection_sources import (
    SyntheticDetectionSource,
    build_replay_source,
)

FEEDS = ["feed1", "feed2", "feed3", "feed4"]


def _write_log(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_synthetic_events_stay_in_documented_ranges() -> None:
    source = SyntheticDetectionSource(feed_ids=lambda: FEEDS, rng=random.Random(3))

    events = [source.next_event() for _ in range(200)]

    for event in events:
        assert event is not None
        assert event.feed_id in FEEDS
        assert event.detection_type in DETECTION_TYPES
        assert 0.7 <= event.confidence <= 1.0
        assert 0.0 <= event.position.x < 300.0
        assert 0.0 <= event.position.y < 200.0
        assert 40.0 <= event.position.width < 100.0
        assert 40.0 <= event.position.height < 100.0


def test_synthetic_source_is_reproducible_with_seed() -> None:
    fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
    first = SyntheticDetectionSource(
        feed_ids=lambda: FEEDS, rng=random.Random(5), clock=lambda: fixed
    )
    second = SyntheticDetectionSource(
        feed_ids=lambda: FEEDS, rng=random.Random(5), clock=lambda: fixed
    )

    assert [first.next_event() for _ in range(10)] == [
        second.next_event() for _ in range(10)
    ]


def test_synthetic_source_without_feeds_fails_tick() -> None:
    source = SyntheticDetectionSource(feed_ids=lambda: [], rng=random.Random(1))

    with pytest.raises(SourceFailure):
        source.next_event()


def test_replay_source_reads_events_in_order(tmp_path: Path) -> None:
    log = _write_log(
        tmp_path / "events.jsonl",
        [
            json.dumps(
                {
                    "feed_id": "feed1",
                    "type": "human",
                    "confidence": 0.9,
                    "position": {"x": 1, "y": 2, "width": 30, "height": 40},
                    "timestamp": "2024-05-01T10:00:00+00:00",
                }
            ),
            "",
            json.dumps({"feed_id": "feed2", "type": "vehicle", "confidence": 0.95}),
        ],
    )
    source = build_replay_source(str(log))

    first = source.next_event()
    second = source.next_event()

    assert first is not None and second is not None
    assert first.feed_id == "feed1"
    assert first.position.height == 40.0
    assert first.timestamp == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert second.detection_type == "vehicle"
    assert source.next_event() is None
    assert source.next_event() is None


def test_replay_source_malformed_line_fails_only_its_tick(tmp_path: Path) -> None:
    log = _write_log(
        tmp_path / "events.jsonl",
        [
            "{not json",
            json.dumps({"feed_id": "feed1", "type": "cat", "confidence": 0.9}),
            json.dumps({"feed_id": "feed1", "type": "human", "confidence": 1.5}),
            json.dumps({"feed_id": "feed4", "type": "animal", "confidence": 0.8}),
        ],
    )
    source = build_replay_source(str(log))

    for _ in range(3):
        with pytest.raises(SourceFailure):
            source.next_event()
    event = source.next_event()

    assert event is not None
    assert event.feed_id == "feed4"


def test_build_replay_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="replay log not found"):
        build_replay_source(str(tmp_path / "missing.jsonl"))


def test_replay_source_reports_exhaustion_after_last_line(tmp_path: Path) -> None:
    log = _write_log(
        tmp_path / "events.jsonl",
        [
            "{not json",
            json.dumps({"feed_id": "feed3", "type": "drone", "confidence": 0.8}),
        ],
    )
    source = build_replay_source(str(log))

    with pytest.raises(SourceFailure):
        source.next_event()
    assert source.exhausted is False
    assert source.next_event() is not None
    assert source.exhausted is False
    assert source.next_event() is None
    assert source.exhausted is True
