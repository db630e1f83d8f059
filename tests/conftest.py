from __future__ import annotations

import ipaddress
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def signing_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def make_cert(signing_key):
    """
    Factory for self-signed leaf certificates.

    ``sans=None`` leaves the SAN extension out; strings are DNS names,
    ``ipaddress`` objects become IP entries and GeneralName instances are
    passed through.
    """

    def _make(
        cn: str | None = "example.com",
        sans=None,
        not_before: datetime = NOW - timedelta(days=30),
        not_after: datetime = NOW + timedelta(days=60),
        org: str = "Example Org",
    ) -> x509.Certificate:
        attrs = [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, org),
        ]
        if cn is not None:
            attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, cn))
        name = x509.Name(attrs)

        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(signing_key.public_key())
            .serial_number(0x1234ABCD)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
        )
        if sans is not None:
            general_names = []
            for s in sans:
                if isinstance(s, str):
                    general_names.append(x509.DNSName(s))
                elif isinstance(s, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
                    general_names.append(x509.IPAddress(s))
                else:
                    general_names.append(s)
            builder = builder.add_extension(x509.SubjectAlternativeName(general_names), critical=False)
        return builder.sign(signing_key, hashes.SHA256())

    return _make


@pytest.fixture
def der_of():
    def _der(cert: x509.Certificate) -> bytes:
        return cert.public_bytes(serialization.Encoding.DER)

    return _der


@pytest.fixture
def now():
    return NOW
