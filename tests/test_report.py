import json
from datetime import datetime, timezone

from cert_viewer.models import CertificateInfo, Inspection, SanEntry, SanKind, ValidationResult
from cert_viewer.report import render_text, to_payload


def _inspection(sans=None, san_errors=(), expired=False, not_yet_valid=False, matches=True):
    info = CertificateInfo(
        subject="CN=example.com,O=Example Org,C=US",
        issuer="CN=Example CA,O=Example Org,C=US",
        common_name="example.com",
        not_before=datetime(2025, 1, 14, 8, 36, 56, tzinfo=timezone.utc),
        not_after=datetime(2026, 1, 14, 8, 36, 55, tzinfo=timezone.utc),
        fingerprint_sha256=bytes(range(32)),
        sans=sans,
        san_errors=san_errors,
        serial_number="0x1",
        der=b"\x30\x00",
    )
    result = ValidationResult(expired=expired, not_yet_valid=not_yet_valid, hostname_matches=matches)
    return Inspection(host="example.com", port=443, chain_length=3, info=info, result=result)


def test_text_report_layout():
    sans = (
        SanEntry(SanKind.DNS, "example.com", 2),
        SanEntry(SanKind.IP, "192.0.2.1", 7),
        SanEntry(SanKind.OTHER, "admin@example.com", 1),
    )
    text = render_text(_inspection(sans=sans))

    assert text.splitlines() == [
        "Successfully retrieved 3 certificates.",
        "",
        "[Certificate Info]",
        "Host: example.com:443",
        "Subject: CN=example.com,O=Example Org,C=US",
        "Issuer: CN=Example CA,O=Example Org,C=US",
        "Common Name (CN): example.com",
        "Valid From: Tue Jan 14 08:36:56 UTC 2025",
        "Valid To:   Wed Jan 14 08:36:55 UTC 2026",
        "Fingerprint (SHA-256): " + ":".join(f"{i:02X}" for i in range(32)),
        "",
        "[Subject Alternative Names]",
        "DNS: example.com",
        "IP: 192.0.2.1",
        "Type 1: admin@example.com",
        "",
        "[Validation Results]",
        "✅ Certificate is currently valid.",
        "✅ Hostname verified.",
    ]


def test_host_without_port():
    assert "Host: example.com\n" in render_text(_inspection(), show_port=False)


def test_empty_san_list_reads_none_found():
    assert "[Subject Alternative Names]\nNone found\n" in render_text(_inspection(sans=()))


def test_san_diagnostics_are_listed():
    text = render_text(_inspection(sans=(SanEntry(SanKind.DNS, "example.com", 2),), san_errors=("bad entry",)))
    assert "DNS: example.com\nError parsing SAN: bad entry\n" in text
    assert "None found" not in text


def test_expired_and_mismatch_lines():
    text = render_text(_inspection(expired=True, matches=False))
    assert "❌ Certificate has expired." in text
    assert text.endswith("❌ Hostname does not match certificate.")


def test_not_yet_valid_line():
    assert "❌ Certificate not yet valid." in render_text(_inspection(not_yet_valid=True))


def test_payload_is_json_serializable():
    payload = to_payload(_inspection(sans=(SanEntry(SanKind.IP, "192.0.2.1", 7),), san_errors=("x",)))
    decoded = json.loads(json.dumps(payload))

    assert decoded["target"] == {"host": "example.com", "port": 443}
    assert decoded["certificate"]["not_after"] == "2026-01-14T08:36:55Z"
    assert decoded["certificate"]["sans"] == [{"type": "IP", "value": "192.0.2.1"}]
    assert decoded["certificate"]["der_b64"] == "MAA="
    assert decoded["validation"]["currently_valid"] is True
    assert decoded["errors"] == ["x"]
