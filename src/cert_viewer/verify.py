from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .models import CertificateInfo, SanEntry, SanKind, ValidationResult
from .utils import as_utc, utc_now


def _name_matches(hostname: str, pattern: str) -> bool:
    if pattern == hostname:
        return True
    # A leading "*" is a plain suffix match on whatever follows it, so
    # "*.example.com" also covers "a.b.example.com".
    return pattern.startswith("*") and hostname.endswith(pattern[1:])


def hostname_matches(hostname: str, common_name: str, sans: Iterable[SanEntry] | None) -> bool:
    """
    Decide whether ``hostname`` is covered by the certificate's CN or one of
    its DNS SANs. IP and other SAN kinds are never considered.
    """
    try:
        if _name_matches(hostname, common_name):
            return True
        for san in sans or ():
            try:
                if san.kind is SanKind.DNS and _name_matches(hostname, san.value):
                    return True
            except (AttributeError, TypeError):
                continue
        return False
    except Exception:
        return False


def validate(info: CertificateInfo, hostname: str, now: datetime | None = None) -> ValidationResult:
    now = as_utc(now) if now is not None else utc_now()
    return ValidationResult(
        expired=now > info.not_after,
        not_yet_valid=now < info.not_before,
        hostname_matches=hostname_matches(hostname, info.common_name, info.sans),
    )
