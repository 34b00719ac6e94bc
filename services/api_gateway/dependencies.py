import random
import threading

from libs.core.application.alert_manager import AlertManager
from libs.core.application.contracts import DetectionSource
from libs.core.application.dispatcher import Dispatcher
from libs.core.application.feed_registry import FeedRegistry
from libs.core.application.stats_aggregator import StatsAggregator
from libs.core.application.surveillance_service import SurveillanceService
from libs.core.config import Settings, get_settings
from services.api_gateway.infrastructure.detection_sources import (
    SyntheticDetectionSource,
    build_replay_source,
)


def build_surveillance_service(settings: Settings) -> SurveillanceService:
    rng = random.Random(settings.rng_seed)
    state_lock = threading.RLock()

    registry = FeedRegistry()
    alerts = AlertManager()
    stats = StatsAggregator(
        false_alarm_rate=settings.false_alarm_rate,
        system_uptime=settings.system_uptime,
    )

    source: DetectionSource
    if settings.detection_source == "replay":
        source = build_replay_source(settings.replay_log_path)
    else:
        source = SyntheticDetectionSource(
            feed_ids=registry.feed_ids,
            rng=random.Random(rng.getrandbits(64)),
        )

    dispatcher = Dispatcher(
        source=source,
        registry=registry,
        alerts=alerts,
        stats=stats,
        rng=rng,
        state_lock=state_lock,
        min_interval_sec=settings.detection_min_interval_sec,
        max_interval_sec=settings.detection_max_interval_sec,
    )
    return SurveillanceService(
        registry=registry,
        alerts=alerts,
        stats=stats,
        dispatcher=dispatcher,
        state_lock=state_lock,
    )


surveillance_service = build_surveillance_service(get_settings())


def get_surveillance_service() -> SurveillanceService:
    return surveillance_service


def reset_state() -> None:
    global surveillance_service
    surveillance_service.stop()
    surveillance_service = build_surveillance_service(get_settings())
