"""Runtime configuration resolved from environment variables."""

import logging
import os
from dataclasses import dataclass, field
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path

from dateutil import tz

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"


@dataclass
class Settings:
    """Paths, business timezone and logging level."""

    app_tz: str = DEFAULT_TIMEZONE
    fleet_data_file: Path = Path("data/fleet.yaml")
    sent_log_file: Path = Path("data/notification_logs.yaml")
    secret_key: str = "dev-secret-key-change-in-prod"
    log_level: str = "INFO"
    _zone: tzinfo = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        env = os.environ
        if env.get("APP_TZ"):
            self.app_tz = env["APP_TZ"]
        if env.get("FLEET_DATA_FILE"):
            self.fleet_data_file = Path(env["FLEET_DATA_FILE"])
        if env.get("SENT_LOG_FILE"):
            self.sent_log_file = Path(env["SENT_LOG_FILE"])
        if env.get("SECRET_KEY"):
            self.secret_key = env["SECRET_KEY"]
        if env.get("LOG_LEVEL"):
            self.log_level = env["LOG_LEVEL"].upper()

    @property
    def timezone(self) -> tzinfo:
        """Business timezone; raises ValueError for an unknown zone name."""
        if self._zone is None:
            self._zone = resolve_timezone(self.app_tz)
        return self._zone


def resolve_timezone(name: str) -> tzinfo:
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
