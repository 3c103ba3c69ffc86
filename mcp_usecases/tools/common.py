"""Helpers shared by the use-case tools: timestamps, ids and error text."""

import random
import string
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

_BASE36 = string.digits + string.ascii_lowercase


def epoch_ms() -> int:
    return int(time.time() * 1000)


def random_token(length: int, rng: Optional[random.Random] = None, upper: bool = False) -> str:
    """Random base36 string, e.g. for confirmation numbers."""
    rng = rng or random
    token = "".join(rng.choice(_BASE36) for _ in range(length))
    return token.upper() if upper else token


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime string into an aware UTC datetime.

    Date-only values map to midnight UTC and naive datetimes are taken as
    UTC. Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[str]) -> str:
    """Human-readable rendering of an ISO timestamp, falling back to the raw text."""
    parsed = parse_datetime(value)
    if parsed is None:
        return value or "Unknown"
    return parsed.strftime("%m/%d/%Y, %I:%M:%S %p UTC")


def error_message(error: BaseException) -> str:
    """Message shown to the agent when a provider call fails."""
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return f"{response.status_code} {response.reason_phrase}".strip()
    return str(error) or "Unknown error"
