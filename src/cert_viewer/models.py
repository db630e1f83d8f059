from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime

from .utils import format_fingerprint


COMMON_NAME_NOT_FOUND = "Not Found"
COMMON_NAME_PARSE_ERROR = "Error parsing CN"


class SanKind(str, enum.Enum):
    DNS = "DNS"
    IP = "IP"
    OTHER = "Other"


# GeneralName CHOICE tags (RFC 5280, section 4.2.1.6)
SAN_TYPE_DNS = 2
SAN_TYPE_IP = 7


@dataclass(frozen=True)
class SanEntry:
    kind: SanKind
    value: str
    type_id: int

    @property
    def label(self) -> str:
        if self.kind is SanKind.OTHER:
            return f"Type {self.type_id}"
        return self.kind.value


@dataclass(frozen=True)
class CertificateInfo:
    """
    Read-only snapshot of the fields reported for one leaf certificate.

    ``sans`` is None when the certificate carries no SAN extension, and an
    empty tuple when the extension is present but yields no entries.
    """
    subject: str
    issuer: str
    common_name: str
    not_before: datetime  # aware, UTC
    not_after: datetime   # aware, UTC
    fingerprint_sha256: bytes
    sans: tuple[SanEntry, ...] | None = None
    san_errors: tuple[str, ...] = ()
    serial_number: str | None = None
    der: bytes = field(default=b"", repr=False)

    @property
    def fingerprint(self) -> str:
        return format_fingerprint(self.fingerprint_sha256)

    @property
    def dns_names(self) -> list[str]:
        return [s.value for s in self.sans or () if s.kind is SanKind.DNS]


@dataclass(frozen=True)
class ValidationResult:
    expired: bool
    not_yet_valid: bool
    hostname_matches: bool

    @property
    def currently_valid(self) -> bool:
        return not (self.expired or self.not_yet_valid)

    @property
    def message(self) -> str:
        messages = []
        if self.expired:
            messages.append("Certificate has expired")
        if self.not_yet_valid:
            messages.append("Certificate is not yet valid")
        if not self.hostname_matches:
            messages.append("Hostname does not match certificate")
        return "; ".join(messages) or "Certificate is valid"


@dataclass(frozen=True)
class InspectOptions:
    timeout_seconds: float = 10
    sni: str | None = None
    verify_chain: bool = False


@dataclass(frozen=True)
class Inspection:
    """
    Outcome of one run: the leaf's fields plus the checks computed for the
    requested hostname.

    ``chain`` holds the presented certificates that could be decoded, leaf
    first; ``chain_length`` counts everything the server sent.
    """
    host: str
    port: int
    chain_length: int
    info: CertificateInfo
    result: ValidationResult
    chain: tuple[CertificateInfo, ...] = ()
