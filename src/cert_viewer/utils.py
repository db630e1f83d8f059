from __future__ import annotations

import base64
from datetime import datetime, timezone


REPORT_DATE_FORMAT = "%a %b %d %H:%M:%S %Z %Y"


def b64_der(der: bytes) -> str:
    return base64.b64encode(der).decode("ascii")


def format_fingerprint(digest: bytes) -> str:
    """Render a digest as colon-separated uppercase hex pairs (``AB:01:...``)."""
    return ":".join(f"{b:02X}" for b in digest)


def parse_fingerprint(text: str) -> bytes:
    return bytes.fromhex(text.replace(":", ""))


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def dt_to_utc_iso(dt: datetime) -> str:
    return as_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def dt_to_report(dt: datetime) -> str:
    # e.g. "Tue Jan 14 08:36:56 UTC 2025"
    return as_utc(dt).strftime(REPORT_DATE_FORMAT)
