"""
Kiosk settings from the environment.

    KIOSK_API_URL=https://api.example.com
    KIOSK_HTTP_TIMEOUT=10
    KIOSK_PAYMENT_TTL_MINUTES=15
    KIOSK_NOTIFICATION_SECONDS=3
    KIOSK_RECONNECT_ATTEMPTS=3
    KIOSK_RECONNECT_BASE_SECONDS=3
    KIOSK_RECONNECT_MAX_SECONDS=10
    KIOSK_CONFIRMATION_SECONDS=10
    KIOSK_CATALOG_TTL_MINUTES=5
    KIOSK_TICK_SECONDS=1
    KIOSK_URGENT_SECONDS=60
    KIOSK_PULSE_SECONDS=0.5
    KIOSK_LOG_LEVEL=INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from kiosk.channel import ReconnectPolicy

logger = logging.getLogger(__name__)


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class Settings:
    api_url: str = "http://localhost:8080"
    http_timeout: float = 10.0
    payment_ttl: timedelta = timedelta(minutes=15)
    notification_seconds: float = 3.0
    reconnect_attempts: int = 3
    reconnect_base_seconds: float = 3.0
    reconnect_max_seconds: float = 10.0
    confirmation_seconds: float = 10.0
    catalog_ttl: timedelta = timedelta(minutes=5)
    tick_seconds: float = 1.0
    urgent_seconds: int = 60
    pulse_seconds: float = 0.5
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: str | None = None) -> Settings:
        """Read KIOSK_* variables, after loading `env_file` (or ./.env) if present."""
        load_dotenv(env_file)
        d = cls()
        return cls(
            api_url=os.getenv("KIOSK_API_URL", d.api_url).rstrip("/"),
            http_timeout=_float("KIOSK_HTTP_TIMEOUT", d.http_timeout),
            payment_ttl=timedelta(minutes=_float("KIOSK_PAYMENT_TTL_MINUTES", d.payment_ttl.total_seconds() / 60)),
            notification_seconds=_float("KIOSK_NOTIFICATION_SECONDS", d.notification_seconds),
            reconnect_attempts=_int("KIOSK_RECONNECT_ATTEMPTS", d.reconnect_attempts),
            reconnect_base_seconds=_float("KIOSK_RECONNECT_BASE_SECONDS", d.reconnect_base_seconds),
            reconnect_max_seconds=_float("KIOSK_RECONNECT_MAX_SECONDS", d.reconnect_max_seconds),
            confirmation_seconds=_float("KIOSK_CONFIRMATION_SECONDS", d.confirmation_seconds),
            catalog_ttl=timedelta(minutes=_float("KIOSK_CATALOG_TTL_MINUTES", d.catalog_ttl.total_seconds() / 60)),
            tick_seconds=_float("KIOSK_TICK_SECONDS", d.tick_seconds),
            urgent_seconds=_int("KIOSK_URGENT_SECONDS", d.urgent_seconds),
            pulse_seconds=_float("KIOSK_PULSE_SECONDS", d.pulse_seconds),
            log_level=os.getenv("KIOSK_LOG_LEVEL", d.log_level).upper(),
        )

    def reconnect_policy(self) -> ReconnectPolicy:
        return (
            ReconnectPolicy()
            .with_max_attempts(self.reconnect_attempts)
            .with_delays(base=self.reconnect_base_seconds, maximum=self.reconnect_max_seconds)
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("logging configured at %s", level)


__all__ = ("Settings", "configure_logging")
