from __future__ import annotations


class CertViewerError(Exception):
    """Base class for errors reported to the user."""


class UsageError(CertViewerError):
    pass


class ConnectorError(CertViewerError):
    """
    Raised when no TLS session could be established with the target.
    """

    def __init__(self, message: str, *, host: str, port: int) -> None:
        super().__init__(message)
        self.host = host
        self.port = port


class UnknownHostError(ConnectorError):
    pass


class ConnectionFailedError(ConnectorError):
    # refused, unreachable or timed out
    pass


class HandshakeError(ConnectorError):
    pass


class TransportError(ConnectorError):
    pass


class CertificateError(CertViewerError):
    """The peer sent no certificate, or the leaf could not be decoded."""
