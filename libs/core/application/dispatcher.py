"""Detection dispatcher: the single control loop of the pipeline."""

from __future__ import annotations

import threading
from typing import Literal
from uuid import uuid4

import structlog

from libs.core.application.alert_manager import AlertManager
from libs.core.application.contracts import DetectionSource, RandomSource
from libs.core.application.errors import SourceFailure, UnknownFeedError
from libs.core.application.feed_registry import FeedRegistry
from libs.core.application.stats_aggregator import StatsAggregator
from libs.core.application.threat_classifier import classify
from libs.core.domain.entities import Detection, RawDetectionEvent

logger = structlog.get_logger(__name__)

DispatcherState = Literal["running", "paused"]

DEFAULT_MIN_INTERVAL_SEC = 3.0
DEFAULT_MAX_INTERVAL_SEC = 8.0
STOP_JOIN_TIMEOUT_SEC = 5.0


class Dispatcher:
    """Pulls detection events and commits them to the state stores.

    Each event is classified, appended to its feed history, offered to the
    alert manager and recorded in stats while ``state_lock`` is held, so
    readers sharing the lock only ever see fully committed updates.
    """

    def __init__(
        self,
        source: DetectionSource,
        registry: FeedRegistry,
        alerts: AlertManager,
        stats: StatsAggregator,
        rng: RandomSource,
        state_lock: threading.RLock | None = None,
        min_interval_sec: float = DEFAULT_MIN_INTERVAL_SEC,
        max_interval_sec: float = DEFAULT_MAX_INTERVAL_SEC,
    ) -> None:
        if min_interval_sec < 0 or max_interval_sec < min_interval_sec:
            raise ValueError("invalid inter-arrival interval bounds")
        self._source = source
        self._registry = registry
        self._alerts = alerts
        self._stats = stats
        self._rng = rng
        self._state_lock = state_lock or threading.RLock()
        self._min_interval_sec = min_interval_sec
        self._max_interval_sec = max_interval_sec

        self._wakeup = threading.Condition()
        self._state: DispatcherState = "running"
        # bumped on pause/resume/stop so a pending wait knows it was cancelled
        self._generation = 0
        self._stop_requested = False
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> DispatcherState:
        with self._wakeup:
            return self._state

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._wakeup:
            if self.is_alive:
                return
            self._stop_requested = False
            self._thread = threading.Thread(
                target=self._run,
                name="detection-dispatcher",
                daemon=True,
            )
            self._thread.start()
        logger.info("dispatcher_started", state=self._state)

    def stop(self) -> None:
        with self._wakeup:
            self._stop_requested = True
            self._generation += 1
            self._wakeup.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=STOP_JOIN_TIMEOUT_SEC)
        self._thread = None
        logger.info("dispatcher_stopped")

    def pause(self) -> DispatcherState:
        with self._wakeup:
            if self._state == "paused":
                return self._state
            self._state = "paused"
            self._generation += 1
            self._wakeup.notify_all()
        logger.info("dispatcher_paused")
        return "paused"

    def resume(self) -> DispatcherState:
        with self._wakeup:
            if self._state == "running":
                return self._state
            self._state = "running"
            self._generation += 1
            self._wakeup.notify_all()
        logger.info("dispatcher_resumed")
        return "running"

    def next_delay(self) -> float:
        return self._rng.uniform(self._min_interval_sec, self._max_interval_sec)

    def run_once(self) -> Detection | None:
        """Pull one event from the source and process it."""
        try:
            event = self._source.next_event()
        except SourceFailure as error:
            logger.warning("detection_source_failed", error=str(error))
            return None
        if event is None:
            logger.debug("detection_source_idle")
            return None
        return self.process_event(event)

    def process_event(self, event: RawDetectionEvent) -> Detection | None:
        """Commit one event; returns the stored detection or None if dropped."""
        with self._state_lock:
            try:
                feed = self._registry.get(event.feed_id)
            except UnknownFeedError:
                logger.warning(
                    "detection_dropped_unknown_feed",
                    feed_id=event.feed_id,
                    detection_type=event.detection_type,
                )
                return None

            detection = Detection(
                detection_id=f"det_{uuid4().hex}",
                detection_type=event.detection_type,
                confidence=event.confidence,
                position=event.position,
                timestamp=event.timestamp,
                threat_level=classify(
                    detection_type=event.detection_type,
                    confidence=event.confidence,
                    feed_location=feed.location,
                    rng=self._rng,
                ),
                feed_id=feed.feed_id,
            )
            self._registry.append_detection(feed.feed_id, detection)
            self._alerts.maybe_alert(detection, feed_name=feed.name)
            self._stats.record(detection)

        logger.debug(
            "detection_processed",
            detection_id=detection.detection_id,
            feed_id=detection.feed_id,
            detection_type=detection.detection_type,
            confidence=round(detection.confidence, 3),
            threat_level=detection.threat_level,
        )
        return detection

    def _run(self) -> None:
        while self._await_next_emission():
            try:
                self.run_once()
            except Exception as error:  # noqa: BLE001
                logger.error(
                    "dispatcher_tick_failed",
                    error=str(error),
                    error_type=type(error).__name__,
                )

    def _await_next_emission(self) -> bool:
        """Block until the next scheduled emission; False means stop."""
        with self._wakeup:
            while True:
                while self._state == "paused" and not self._stop_requested:
                    self._wakeup.wait()
                if self._stop_requested:
                    return False

                generation = self._generation
                delay = self.next_delay()
                cancelled = self._wakeup.wait_for(
                    lambda: self._generation != generation,
                    timeout=delay,
                )
                if self._stop_requested:
                    return False
                if not cancelled:
                    return True
