from __future__ import annotations

import threading

from libs.core.application.alert_manager import AlertManager
from libs.core.application.dispatcher import Dispatcher, DispatcherState
from libs.core.application.errors import UnknownFeedError
from libs.core.application.feed_registry import FeedRegistry
from libs.core.application.stats_aggregator import StatsAggregator
from libs.core.domain.entities import (
    Alert,
    Detection,
    Feed,
    FeedStatus,
    RawDetectionEvent,
    Stats,
)


class SurveillanceService:
    """Application service behind the operator control surface."""

    def __init__(
        self,
        registry: FeedRegistry,
        alerts: AlertManager,
        stats: StatsAggregator,
        dispatcher: Dispatcher,
        state_lock: threading.RLock,
    ) -> None:
        self._registry = registry
        self._alerts = alerts
        self._stats = stats
        self._dispatcher = dispatcher
        self._lock = state_lock

    def start(self) -> None:
        self._dispatcher.start()

    def stop(self) -> None:
        self._dispatcher.stop()

    def pause(self) -> DispatcherState:
        return self._dispatcher.pause()

    def resume(self) -> DispatcherState:
        return self._dispatcher.resume()

    def dispatcher_state(self) -> DispatcherState:
        return self._dispatcher.state

    def dispatcher_alive(self) -> bool:
        return self._dispatcher.is_alive

    def submit_event(self, event: RawDetectionEvent) -> Detection | None:
        """Push one event from a callback-style source straight into the pipeline."""
        return self._dispatcher.process_event(event)

    def list_feeds(self) -> list[Feed]:
        with self._lock:
            return self._registry.list()

    def select_feed(self, feed_id: str) -> Feed | None:
        with self._lock:
            try:
                return self._registry.get(feed_id)
            except UnknownFeedError:
                return None

    def set_feed_status(self, feed_id: str, status: FeedStatus) -> Feed:
        with self._lock:
            return self._registry.set_status(feed_id, status)

    def list_alerts(self, unacknowledged_only: bool = False) -> list[Alert]:
        with self._lock:
            if unacknowledged_only:
                return self._alerts.list_unacknowledged()
            return self._alerts.list_all()

    def get_alert(self, alert_id: str) -> Alert | None:
        with self._lock:
            return self._alerts.get(alert_id)

    def acknowledge_alert(self, alert_id: str) -> Alert:
        with self._lock:
            return self._alerts.acknowledge(alert_id)

    def get_stats(self) -> Stats:
        with self._lock:
            return self._stats.snapshot()

    def configure_stats(
        self,
        false_alarm_rate: float | None = None,
        system_uptime: str | None = None,
    ) -> Stats:
        with self._lock:
            return self._stats.configure(
                false_alarm_rate=false_alarm_rate,
                system_uptime=system_uptime,
            )
