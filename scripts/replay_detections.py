from __future__ import annotations

import argparse
import random
import threading

from libs.core.application.alert_manager import AlertManager
from libs.core.application.dispatcher import Dispatcher
from libs.core.application.feed_registry import FeedRegistry
from libs.core.application.stats_aggregator import StatsAggregator
from libs.core.logging import get_logger, setup_logging
from services.api_gateway.infrastructure.detection_sources import (
    ReplayDetectionSource,
    build_replay_source,
)


def replay(
    source: ReplayDetectionSource,
    seed: int | None,
) -> tuple[FeedRegistry, AlertManager, StatsAggregator]:
    registry = FeedRegistry()
    alerts = AlertManager()
    stats = StatsAggregator()
    dispatcher = Dispatcher(
        source=source,
        registry=registry,
        alerts=alerts,
        stats=stats,
        rng=random.Random(seed),
        state_lock=threading.RLock(),
    )

    tick = 0
    while True:
        detection = dispatcher.run_once()
        if detection is None:
            if source.exhausted:
                break
            print(f"[TICK {tick}] skipped")
            tick += 1
            continue
        print(
            f"[TICK {tick}] {detection.feed_id} {detection.detection_type} "
            f"conf={detection.confidence:.2f} -> {detection.threat_level}"
        )
        tick += 1
    return registry, alerts, stats


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--log",
        required=True,
        help="Path to JSON-lines file with raw detection events",
    )
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    setup_logging()
    logger = get_logger("replay_detections")

    try:
        source = build_replay_source(args.log)
    except ValueError as error:
        raise SystemExit(str(error)) from error

    logger.info("replay_started", log=args.log, seed=args.seed)

    registry, alerts, stats = replay(source, seed=args.seed)

    snapshot = stats.snapshot()
    print(
        f"[DONE] detections={snapshot.total_detections} "
        f"high_threat={snapshot.high_threat_alerts} "
        f"alerts_queued={len(alerts.list_all())}"
    )
    for feed in registry.list():
        print(f"  {feed.feed_id} {feed.name}: {len(feed.detections)} recent")
    for alert in alerts.list_unacknowledged():
        print(f"  ! {alert.message} -> {alert.recommendation}")


if __name__ == "__main__":
    main()
