"""
pgpmint.utils
-------------
Epoch/datetime conversion and human-readable fingerprints.
"""

from __future__ import annotations
import calendar, time
from datetime import datetime, timezone


def now_epoch() -> int:
    # OpenPGP timestamps are whole seconds since the epoch, UTC
    return int(time.time())

def to_datetime(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, timezone.utc)

def to_epoch(dt: datetime) -> int:
    # timegm treats naive values as UTC, which is what pgpy hands back
    return calendar.timegm(dt.utctimetuple())

def format_fingerprint(fpr: str) -> str:
    """Group a fingerprint in blocks of four hex digits, gpg style."""
    h = fpr.replace(" ", "").upper()
    return " ".join(h[i:i + 4] for i in range(0, len(h), 4))
