"""Runtime settings, read once from ``DSV_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# When installed in editable mode the project root is the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATABASE_URL = f"sqlite:///{_PROJECT_ROOT / 'data' / 'dsv.db'}"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"console", "json"}


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    low_stock_threshold: int = 10
    payment_tolerance: Decimal = Decimal("1000")
    recompute_client_totals: bool = False
    timezone: str = "Asia/Ho_Chi_Minh"
    log_level: str = "INFO"
    log_format: str = "console"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (``os.environ`` by default).

        Raises ValueError on any malformed value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        threshold = _int(env, "DSV_LOW_STOCK_THRESHOLD", defaults.low_stock_threshold)
        if threshold < 0:
            raise ValueError("DSV_LOW_STOCK_THRESHOLD must not be negative")

        tolerance = _decimal(env, "DSV_PAYMENT_TOLERANCE", defaults.payment_tolerance)
        if tolerance < 0:
            raise ValueError("DSV_PAYMENT_TOLERANCE must not be negative")

        timezone = env.get("DSV_TIMEZONE", defaults.timezone)
        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"DSV_TIMEZONE is not a known time zone: {timezone!r}") from None

        log_level = env.get("DSV_LOG_LEVEL", defaults.log_level).upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"DSV_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

        log_format = env.get("DSV_LOG_FORMAT", defaults.log_format).lower()
        if log_format not in _LOG_FORMATS:
            raise ValueError(f"DSV_LOG_FORMAT must be one of {sorted(_LOG_FORMATS)}")

        return cls(
            database_url=env.get("DSV_DATABASE_URL", defaults.database_url),
            low_stock_threshold=threshold,
            payment_tolerance=tolerance,
            recompute_client_totals=_bool(
                env, "DSV_RECOMPUTE_CLIENT_TOTALS", defaults.recompute_client_totals
            ),
            timezone=timezone,
            log_level=log_level,
            log_format=log_format,
        )


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _decimal(env: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")
