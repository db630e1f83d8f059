from __future__ import annotations

import errno
import logging
import socket
import ssl

from .errors import (
    CertificateError,
    ConnectionFailedError,
    HandshakeError,
    TransportError,
    UnknownHostError,
)


logger = logging.getLogger(__name__)

DEFAULT_PORT = 443
DEFAULT_TIMEOUT_SECONDS = 10

_UNREACHABLE_ERRNOS = frozenset({errno.ENETUNREACH, errno.EHOSTUNREACH})


def make_context(*, verify_chain: bool = False) -> ssl.SSLContext:
    """
    Default client context. Unless ``verify_chain`` is set, trust and hostname
    checks are switched off so that the certificate can be inspected even when
    the platform would reject it; validity and hostname are checked by
    :mod:`cert_viewer.verify` instead.
    """
    ctx = ssl.create_default_context()
    if not verify_chain:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _peer_chain(ssock: ssl.SSLSocket) -> list[bytes]:
    # Only available on Python 3.13+; older interpreters expose the leaf only.
    for attr in ("get_verified_chain", "get_unverified_chain"):
        getter = getattr(ssock, attr, None)
        if getter is None:
            continue
        try:
            chain = getter()
        except (ssl.SSLError, ValueError):
            continue
        if chain:
            return [c for c in chain if isinstance(c, (bytes, bytearray))]
    return []


def fetch_presented_chain(
    host: str,
    port: int = DEFAULT_PORT,
    *,
    sni: str | None = None,
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
    context: ssl.SSLContext | None = None,
) -> list[bytes]:
    """
    Connect to ``host:port``, complete a TLS handshake and return the DER
    certificates the server presented, leaf first.

    The socket is closed before returning, on success and on every error.
    """
    ctx = context if context is not None else make_context()
    server_name = sni or host

    logger.debug("connecting to %s:%s (sni=%s, timeout=%s)", host, port, server_name, timeout_seconds)
    try:
        with socket.create_connection((host, port), timeout=timeout_seconds) as sock:
            with ctx.wrap_socket(sock, server_hostname=server_name) as ssock:
                leaf_der = ssock.getpeercert(binary_form=True)
                chain_ders = _peer_chain(ssock)
                logger.debug("handshake with %s:%s done (%s)", host, port, ssock.version())
    except socket.gaierror as e:
        raise UnknownHostError(f"could not resolve {host}: {e.strerror or e}", host=host, port=port) from e
    except ssl.SSLError as e:
        raise HandshakeError(f"TLS handshake with {host}:{port} failed: {e}", host=host, port=port) from e
    except (ConnectionError, TimeoutError) as e:
        raise ConnectionFailedError(f"could not connect to {host}:{port}: {e}", host=host, port=port) from e
    except OSError as e:
        if e.errno in _UNREACHABLE_ERRNOS:
            raise ConnectionFailedError(f"could not connect to {host}:{port}: {e}", host=host, port=port) from e
        raise TransportError(f"I/O error talking to {host}:{port}: {e}", host=host, port=port) from e

    if not leaf_der:
        raise CertificateError(f"{host}:{port} did not present a certificate")

    ders: list[bytes] = [bytes(leaf_der)]
    for d in chain_ders:
        if d and bytes(d) not in ders:
            ders.append(bytes(d))
    return ders
