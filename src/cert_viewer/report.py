from __future__ import annotations

from typing import Any

from . import __version__
from .models import CertificateInfo, Inspection
from .utils import b64_der, dt_to_report, dt_to_utc_iso


def render_text(inspection: Inspection, *, show_port: bool = True) -> str:
    info = inspection.info
    result = inspection.result
    host = f"{inspection.host}:{inspection.port}" if show_port else inspection.host

    lines = [
        f"Successfully retrieved {inspection.chain_length} certificates.",
        "",
        "[Certificate Info]",
        f"Host: {host}",
        f"Subject: {info.subject}",
        f"Issuer: {info.issuer}",
        f"Common Name (CN): {info.common_name}",
        f"Valid From: {dt_to_report(info.not_before)}",
        f"Valid To:   {dt_to_report(info.not_after)}",
        f"Fingerprint (SHA-256): {info.fingerprint}",
        "",
        "[Subject Alternative Names]",
    ]

    if info.sans:
        lines.extend(f"{san.label}: {san.value}" for san in info.sans)
    lines.extend(f"Error parsing SAN: {err}" for err in info.san_errors)
    if not info.sans:
        lines.append("None found")

    lines += ["", "[Validation Results]"]
    if result.expired:
        lines.append("❌ Certificate has expired.")
    elif result.not_yet_valid:
        lines.append("❌ Certificate not yet valid.")
    else:
        lines.append("✅ Certificate is currently valid.")

    if result.hostname_matches:
        lines.append("✅ Hostname verified.")
    else:
        lines.append("❌ Hostname does not match certificate.")
    return "\n".join(lines)


def _cert_summary(info: CertificateInfo) -> dict[str, Any]:
    return {
        "subject": info.subject,
        "issuer": info.issuer,
        "common_name": info.common_name,
        "serial_number": info.serial_number,
        "not_before": dt_to_utc_iso(info.not_before),
        "not_after": dt_to_utc_iso(info.not_after),
        "fingerprint_sha256": info.fingerprint,
    }


def to_payload(inspection: Inspection) -> dict[str, Any]:
    info = inspection.info
    result = inspection.result
    return {
        "target": {"host": inspection.host, "port": inspection.port},
        "version": __version__,
        "chain_length": inspection.chain_length,
        "certificate": {
            **_cert_summary(info),
            "sans": (
                None
                if info.sans is None
                else [{"type": san.label, "value": san.value} for san in info.sans]
            ),
            "der_b64": b64_der(info.der),
        },
        "validation": {
            "expired": result.expired,
            "not_yet_valid": result.not_yet_valid,
            "currently_valid": result.currently_valid,
            "hostname_matches": result.hostname_matches,
            "message": result.message,
        },
        "chain": [_cert_summary(c) for c in inspection.chain or (info,)],
        "errors": list(info.san_errors),
    }
