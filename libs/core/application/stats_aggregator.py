from libs.core.domain.entities import Detection, Stats

DEFAULT_FALSE_ALARM_RATE = 12.0
DEFAULT_SYSTEM_UPTIME = "99.8%"


class StatsAggregator:
    """Rolling counters derived from processed detections.

    ``false_alarm_rate`` and ``system_uptime`` are display values supplied by
    configuration; ``record`` never touches them.
    """

    def __init__(
        self,
        false_alarm_rate: float = DEFAULT_FALSE_ALARM_RATE,
        system_uptime: str = DEFAULT_SYSTEM_UPTIME,
    ) -> None:
        self._total_detections = 0
        self._high_threat_alerts = 0
        self._false_alarm_rate = false_alarm_rate
        self._system_uptime = system_uptime

    def record(self, detection: Detection) -> None:
        self._total_detections += 1
        if detection.threat_level == "High":
            self._high_threat_alerts += 1

    def configure(
        self,
        false_alarm_rate: float | None = None,
        system_uptime: str | None = None,
    ) -> Stats:
        if false_alarm_rate is not None:
            self._false_alarm_rate = false_alarm_rate
        if system_uptime is not None:
            self._system_uptime = system_uptime
        return self.snapshot()

    def snapshot(self) -> Stats:
        return Stats(
            total_detections=self._total_detections,
            high_threat_alerts=self._high_threat_alerts,
            false_alarm_rate=self._false_alarm_rate,
            system_uptime=self._system_uptime,
        )
