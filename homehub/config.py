"""
Centralized configuration with environment variable overrides.

API endpoints, timeouts, booking slots, and invoice settings are all
configurable here. Nothing is hardcoded in booking or payment logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

from homehub.logging_context import AttemptIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIME_SLOTS = "08:00,09:00,10:00,11:00,12:00,13:00,14:00,15:00,16:00,17:00,18:00"
INVOICE_NUMBER_SCHEMES = ("hash", "legacy")
LOG_FORMAT = "%(asctime)s [%(name)s] [%(attempt_id)s] %(levelname)s: %(message)s"

_SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _parse_slots(env_var: str, default: str) -> tuple[str, ...]:
    """Split a comma-separated slot list, dropping blanks."""
    raw = os.getenv(env_var, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class ApiConfig:
    """REST backend location and client timeouts."""

    base_url: str = os.getenv("HOMEHUB_API_URL", "http://localhost:5000/api")
    default_timeout_sec: float = _safe_float("API_TIMEOUT", "30")
    booking_timeout_sec: float = _safe_float("BOOKING_TIMEOUT", "60")


@dataclass(frozen=True)
class BookingConfig:
    """Scheduling rules applied before a booking is submitted."""

    time_slots: tuple[str, ...] = _parse_slots("BOOKING_TIME_SLOTS", DEFAULT_TIME_SLOTS)
    min_lead_days: int = _safe_int("BOOKING_MIN_LEAD_DAYS", "1")


@dataclass(frozen=True)
class InvoiceConfig:
    """Invoice numbering and export settings."""

    currency: str = os.getenv("INVOICE_CURRENCY", "ETB")
    number_prefix: str = os.getenv("INVOICE_NUMBER_PREFIX", "INV-BKG-")
    number_scheme: str = os.getenv("INVOICE_NUMBER_SCHEME", "hash")
    output_dir: str = os.getenv("INVOICE_OUTPUT_DIR", ".")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    api: ApiConfig = field(default_factory=ApiConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    invoice: InvoiceConfig = field(default_factory=InvoiceConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    session_file: str = os.getenv("HOMEHUB_SESSION_FILE", "")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"HOMEHUB_API_URL must be an http(s) URL, got {config.api.base_url!r}"
        )
    if config.api.default_timeout_sec <= 0:
        raise ValueError(
            f"API_TIMEOUT must be > 0, got {config.api.default_timeout_sec}"
        )
    if config.api.booking_timeout_sec < config.api.default_timeout_sec:
        raise ValueError(
            "BOOKING_TIMEOUT must be >= API_TIMEOUT, "
            f"got {config.api.booking_timeout_sec}"
        )
    if config.booking.min_lead_days < 1:
        raise ValueError(
            f"BOOKING_MIN_LEAD_DAYS must be >= 1, got {config.booking.min_lead_days}"
        )
    if not config.booking.time_slots:
        raise ValueError("BOOKING_TIME_SLOTS must list at least one slot")
    for slot in config.booking.time_slots:
        if not _SLOT_PATTERN.match(slot):
            raise ValueError(f"BOOKING_TIME_SLOTS has an invalid slot: {slot!r}")

    if not re.fullmatch(r"[A-Z]{3}", config.invoice.currency):
        raise ValueError(
            f"INVOICE_CURRENCY must be a 3-letter code, got {config.invoice.currency!r}"
        )
    if config.invoice.number_scheme not in INVOICE_NUMBER_SCHEMES:
        raise ValueError(
            f"INVOICE_NUMBER_SCHEME must be one of {INVOICE_NUMBER_SCHEMES}, "
            f"got {config.invoice.number_scheme!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, AttemptIdFilter) for f in handler.filters):
            handler.addFilter(AttemptIdFilter())
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger.info("Configuration loaded for API at %s", config.api.base_url)
    return config


# Singleton instance
settings = load_config()
