"""Engine configuration, read from the environment."""

import os
from dataclasses import dataclass
from datetime import date

from .parsing import parse_date

# First Monday of the 2025/2026 academic year
DEFAULT_EPOCH = date(2025, 9, 1)
DEFAULT_TIMEZONE = "Europe/Chisinau"
DEFAULT_API_BASE_URL = "https://orar-api.ceiti.md/v1"
DEFAULT_AUX_API_BASE_URL = "https://papi.jagged.me/api"
DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by the resolver, the API client and the exporter."""

    epoch: date = DEFAULT_EPOCH
    timezone: str = DEFAULT_TIMEZONE
    api_base_url: str = DEFAULT_API_BASE_URL
    aux_api_base_url: str = DEFAULT_AUX_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if self.epoch.weekday() != 0:
            raise ValueError(f"Epoch must be a Monday, got {self.epoch}")
        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from ``TIMETABLE_*`` environment variables."""
        epoch = os.getenv("TIMETABLE_EPOCH")
        timeout = os.getenv("TIMETABLE_TIMEOUT")
        return cls(
            epoch=parse_date(epoch) if epoch else DEFAULT_EPOCH,
            timezone=os.getenv("TIMETABLE_TIMEZONE", DEFAULT_TIMEZONE),
            api_base_url=os.getenv("TIMETABLE_API_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            aux_api_base_url=os.getenv("TIMETABLE_AUX_API_URL", DEFAULT_AUX_API_BASE_URL).rstrip("/"),
            request_timeout=float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT,
        )
