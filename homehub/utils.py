"""Shared utilities used across the booking core."""

import secrets
import string
from datetime import datetime, timezone
from typing import Callable, Optional

_TOKEN_ALPHABET = string.ascii_uppercase + string.digits

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_referral_code(value: Optional[str]) -> Optional[str]:
    """Trim and uppercase a referral code, returning None when blank.

    Examples:
        >>> normalize_referral_code(" save10 ")
        'SAVE10'
        >>> normalize_referral_code("   ") is None
        True
    """
    if value is None:
        return None
    cleaned = value.strip().upper()
    return cleaned or None


def make_transaction_id(prefix: str, now: datetime, length: int = 9) -> str:
    """Build ``<prefix>-<epoch millis>-<random>`` transaction identifiers."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))
    return f"{prefix}-{millis}-{suffix}"


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
