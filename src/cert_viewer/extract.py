from __future__ import annotations

import logging
import re
from typing import Iterable

from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

from .errors import CertificateError
from .models import (
    COMMON_NAME_NOT_FOUND,
    COMMON_NAME_PARSE_ERROR,
    SAN_TYPE_DNS,
    SAN_TYPE_IP,
    CertificateInfo,
    SanEntry,
    SanKind,
)


logger = logging.getLogger(__name__)


# GeneralName classes -> CHOICE tag
_GENERAL_NAME_TYPES: list[tuple[type, int]] = [
    (x509.OtherName, 0),
    (x509.RFC822Name, 1),
    (x509.DNSName, SAN_TYPE_DNS),
    (x509.DirectoryName, 4),
    (x509.UniformResourceIdentifier, 6),
    (x509.IPAddress, SAN_TYPE_IP),
    (x509.RegisteredID, 8),
]

# asn1crypto GeneralName alternative -> CHOICE tag
_ASN1_GENERAL_NAME_TYPES = {
    "other_name": 0,
    "rfc822_name": 1,
    "dns_name": SAN_TYPE_DNS,
    "x400_address": 3,
    "directory_name": 4,
    "edi_party_name": 5,
    "uniform_resource_identifier": 6,
    "ip_address": SAN_TYPE_IP,
    "registered_id": 8,
}

_SAN_OID = x509.ExtensionOID.SUBJECT_ALTERNATIVE_NAME.dotted_string

# attribute type at the start of each RDN component
_ATTR_TYPE_RE = re.compile(r"(^|(?<!\\)[,+])(\s*)([A-Za-z][A-Za-z0-9-]*)(\s*=)")


def _name_to_str(name: x509.Name) -> str:
    # RFC4514
    try:
        return name.rfc4514_string()
    except Exception:
        return str(name)


def load_certificate(der: bytes) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(bytes(der))
    except ValueError as e:
        raise CertificateError(f"Could not decode certificate: {e}") from e


def _upper_attribute_types(dn: str) -> str:
    # "cn=a,o=b" -> "CN=a,O=b"
    return _ATTR_TYPE_RE.sub(lambda m: m.group(1) + m.group(2) + m.group(3).upper() + m.group(4), dn)


def common_name(name: x509.Name | str) -> str:
    """
    Return the first CN attribute of a distinguished name, scanning RDNs in
    the name's order.

    Never raises: a name without CN gives ``"Not Found"``, one that cannot be
    parsed gives ``"Error parsing CN"``.
    """
    try:
        if isinstance(name, str):
            name = x509.Name.from_rfc4514_string(_upper_attribute_types(name))
        for rdn in name.rdns:
            for attr in rdn:
                if attr.rfc4514_attribute_name.upper() == "CN":
                    value = attr.value
                    if isinstance(value, bytes):
                        value = value.decode("utf-8")
                    return value
    except Exception as e:
        logger.warning("could not parse CN from %r: %s", name, e)
        return COMMON_NAME_PARSE_ERROR
    return COMMON_NAME_NOT_FOUND


def _general_name_type(gn: object) -> int | None:
    for cls, type_id in _GENERAL_NAME_TYPES:
        if isinstance(gn, cls):
            return type_id
    return None


def _general_name_text(gn: x509.GeneralName) -> str:
    if isinstance(gn, x509.DirectoryName):
        return _name_to_str(gn.value)
    if isinstance(gn, x509.RegisteredID):
        return gn.value.dotted_string
    if isinstance(gn, x509.OtherName):
        return f"{gn.type_id.dotted_string}:{gn.value.hex()}"
    value = gn.value
    if not isinstance(value, str):
        # IPAddress values are ipaddress objects
        value = str(value)
    return value


def _san_kind(type_id: int) -> SanKind:
    if type_id == SAN_TYPE_DNS:
        return SanKind.DNS
    if type_id == SAN_TYPE_IP:
        return SanKind.IP
    return SanKind.OTHER


def extract_sans(general_names: Iterable[x509.GeneralName]) -> tuple[tuple[SanEntry, ...], tuple[str, ...]]:
    """
    Classify SAN entries. Entries that cannot be rendered are skipped and
    reported in the second element of the returned pair.
    """
    entries: list[SanEntry] = []
    errors: list[str] = []
    for gn in general_names:
        try:
            type_id = _general_name_type(gn)
            if type_id is None:
                raise ValueError(f"unsupported general name {type(gn).__name__}")
            text = _general_name_text(gn)
        except Exception as e:
            logger.warning("skipping SAN entry: %s", e)
            errors.append(str(e))
            continue

        entries.append(SanEntry(kind=_san_kind(type_id), value=text, type_id=type_id))
    return tuple(entries), tuple(errors)


def _get_sans(cert: x509.Certificate) -> tuple[tuple[SanEntry, ...] | None, tuple[str, ...]]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return None, ()
    except ValueError as e:
        # one bad entry makes cryptography reject the whole extension block
        logger.warning("could not decode extensions, retrying SAN entries one by one: %s", e)
        return _decode_raw_sans(cert)
    return extract_sans(ext.value)


def _raw_general_name_text(gn: asn1_x509.GeneralName) -> str:
    value = gn.chosen
    if gn.name == "directory_name":
        return value.human_friendly
    if gn.name == "registered_id":
        return value.dotted
    if gn.name == "other_name":
        return f"{value['type_id'].dotted}:{value['value'].dump().hex()}"
    if gn.name in ("x400_address", "edi_party_name"):
        return value.dump().hex()
    return str(value.native)


def _decode_raw_sans(cert: x509.Certificate) -> tuple[tuple[SanEntry, ...] | None, tuple[str, ...]]:
    """
    Walk the DER of the SAN extension GeneralName by GeneralName, keeping the
    entries that decode and recording a diagnostic for each one that does not.
    """
    try:
        tbs = asn1_x509.TbsCertificate.load(cert.tbs_certificate_bytes)
        raw = None
        for ext in tbs["extensions"]:
            if ext["extn_id"].dotted == _SAN_OID:
                raw = ext["extn_value"].contents
                break
        if raw is None:
            return None, ()
        general_names = asn1_x509.GeneralNames.load(raw)
        count = len(general_names)
    except Exception as e:
        logger.warning("could not decode SAN extension: %s", e)
        return None, (str(e),)

    entries: list[SanEntry] = []
    errors: list[str] = []
    for i in range(count):
        try:
            gn = general_names[i]
            type_id = _ASN1_GENERAL_NAME_TYPES[gn.name]
            text = _raw_general_name_text(gn)
        except Exception as e:
            logger.warning("skipping SAN entry %d: %s", i, e)
            errors.append(f"entry {i}: {e}")
            continue
        entries.append(SanEntry(kind=_san_kind(type_id), value=text, type_id=type_id))
    return tuple(entries), tuple(errors)


def extract(leaf: x509.Certificate | bytes) -> CertificateInfo:
    """
    Build a :class:`CertificateInfo` from a leaf certificate (object or DER).

    Field-level problems degrade the affected field only.
    """
    cert = load_certificate(leaf) if isinstance(leaf, (bytes, bytearray)) else leaf
    sans, san_errors = _get_sans(cert)

    return CertificateInfo(
        subject=_name_to_str(cert.subject),
        issuer=_name_to_str(cert.issuer),
        common_name=common_name(cert.subject),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        fingerprint_sha256=cert.fingerprint(hashes.SHA256()),
        sans=sans,
        san_errors=san_errors,
        serial_number=hex(cert.serial_number),
        der=cert.public_bytes(serialization.Encoding.DER),
    )
