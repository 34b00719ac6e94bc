from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    service_name: str = Field("perimeter-watch", alias="SERVICE_NAME")

    # Display metrics shown next to the pipeline counters; never computed
    false_alarm_rate: float = Field(12.0, ge=0.0, le=100.0, alias="FALSE_ALARM_RATE")
    system_uptime: str = Field("99.8%", alias="SYSTEM_UPTIME")

    # Inter-arrival delay of the dispatcher, drawn uniformly per tick
    detection_min_interval_sec: float = Field(
        3.0, ge=0.0, alias="DETECTION_MIN_INTERVAL_SEC"
    )
    detection_max_interval_sec: float = Field(
        8.0, ge=0.0, alias="DETECTION_MAX_INTERVAL_SEC"
    )

    # Leave unset for a non-reproducible run
    rng_seed: int | None = Field(None, alias="RNG_SEED")

    detection_source: Literal["synthetic", "replay"] = Field(
        "synthetic", alias="DETECTION_SOURCE"
    )
    replay_log_path: str = Field("", alias="REPLAY_LOG_PATH")

    autostart_dispatcher: bool = Field(True, alias="AUTOSTART_DISPATCHER")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
