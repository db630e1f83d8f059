from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .errors import CertificateError
from .extract import extract
from .fetch import fetch_presented_chain, make_context
from .models import CertificateInfo, InspectOptions, Inspection
from .verify import validate


logger = logging.getLogger(__name__)

ChainFetcher = Callable[..., list[bytes]]


def inspect_target(
    host: str,
    port: int,
    options: InspectOptions | None = None,
    *,
    fetch: ChainFetcher = fetch_presented_chain,
    now: datetime | None = None,
) -> Inspection:
    """
    Fetch the chain presented by ``host:port``, extract the leaf's fields and
    check validity and hostname against ``host``.
    """
    options = options or InspectOptions()
    chain = fetch(
        host,
        port,
        sni=options.sni,
        timeout_seconds=options.timeout_seconds,
        context=make_context(verify_chain=options.verify_chain),
    )
    logger.info("retrieved %d certificate(s) from %s:%s", len(chain), host, port)

    if not chain:
        raise CertificateError(f"{host}:{port} did not present a certificate")

    info = extract(chain[0])
    decoded: list[CertificateInfo] = [info]
    for i, der in enumerate(chain[1:], start=1):
        try:
            decoded.append(extract(der))
        except CertificateError as e:
            logger.warning("skipping chain certificate %d from %s:%s: %s", i, host, port, e)

    result = validate(info, host, now=now)
    return Inspection(
        host=host,
        port=port,
        chain_length=len(chain),
        info=info,
        result=result,
        chain=tuple(decoded),
    )
