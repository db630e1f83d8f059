from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

from . import BANNER
from .errors import CertificateError, CertViewerError, HandshakeError, UnknownHostError, UsageError
from .fetch import DEFAULT_PORT, DEFAULT_TIMEOUT_SECONDS
from .inspector import inspect_target
from .models import InspectOptions
from .report import render_text, to_payload


logger = logging.getLogger(__name__)

_EPILOG = """\
examples:
  cert-viewer google.com
  cert-viewer github.com:443
"""

_INTERACTIVE_PROMPT = "Enter domain name (e.g., example.com): "

# interactive mode error prefixes, most specific first
_ERROR_CATEGORIES: list[tuple[type[BaseException], str]] = [
    (UnknownHostError, "Unknown host"),
    (HandshakeError, "SSL error"),
    (CertificateError, "Certificate error"),
]


def _write_output(out_path: str | None, payload: Any) -> None:
    text = payload if isinstance(payload, str) else json.dumps(payload, indent=2, ensure_ascii=False)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help=f"Connect timeout seconds (default: {DEFAULT_TIMEOUT_SECONDS})",
    )
    p.add_argument(
        "--verify-chain",
        action="store_true",
        help="Let the TLS handshake enforce the system trust store (default: inspect any certificate)",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Diagnostics written to stderr (default: WARNING)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cert-viewer",
        description="SSL/TLS Certificate Viewer: show a server's leaf certificate and check it.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("target", nargs="?", help="Target in the form host[:port] (default port: 443)")
    p.add_argument("--version", "-v", action="store_true", help="Show version information")
    p.add_argument("--sni", help="Override SNI/server name (default: host)")
    p.add_argument("--json", action="store_true", help="Print the report as JSON")
    p.add_argument("--out", "-o", help="Write the report to file (default: stdout)")
    _add_common_options(p)
    return p


def _strip_scheme(target: str) -> str:
    target = target.strip()
    if target.lower().startswith("https://"):
        target = target[len("https://"):]
    return target.rstrip("/")


def _parse_target(target: str) -> tuple[str, int]:
    target = _strip_scheme(target)
    port = DEFAULT_PORT
    host = target
    if ":" in target:
        host, port_s = target.rsplit(":", 1)
        port_s = port_s.strip()
        if not (port_s.isascii() and port_s.isdigit()) or not (1 <= int(port_s) <= 65535):
            raise UsageError(f"Invalid port number: {port_s}")
        port = int(port_s)
    host = host.strip().strip("[]")
    if not host:
        raise UsageError("host is empty")
    return host, port


def normalize_domain(text: str) -> str:
    """
    Host part of what a user typed at the interactive prompt: scheme and any
    ``:port`` suffix are dropped.
    """
    return _strip_scheme(text).split(":")[0].strip()


def _options(args: argparse.Namespace) -> InspectOptions:
    return InspectOptions(
        timeout_seconds=args.timeout,
        sni=getattr(args, "sni", None),
        verify_chain=args.verify_chain,
    )


def main(argv: list[str] | None = None, *, inspect: Callable[..., Any] = inspect_target) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(BANNER)
        return 0

    if not args.target:
        parser.print_help()
        return 0

    _configure_logging(args.log_level)

    try:
        host, port = _parse_target(args.target)
    except UsageError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        inspection = inspect(host, port, _options(args))
    except CertViewerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("unexpected failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _write_output(args.out, to_payload(inspection) if args.json else render_text(inspection))
    return 0


def _error_category(exc: BaseException) -> str:
    for cls, label in _ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "Unexpected error"


def interactive_main(
    argv: list[str] | None = None,
    *,
    prompt: Callable[[str], str] = input,
    inspect: Callable[..., Any] = inspect_target,
) -> int:
    p = argparse.ArgumentParser(
        prog="cert-viewer-interactive",
        description="Prompt for a domain and show its TLS certificate (port 443).",
    )
    _add_common_options(p)
    args = p.parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.log_level)

    try:
        host = normalize_domain(prompt(_INTERACTIVE_PROMPT))
    except EOFError:
        print("❌ No domain entered.", file=sys.stderr)
        return 1
    if not host:
        print("❌ No domain entered.", file=sys.stderr)
        return 1

    try:
        inspection = inspect(host, DEFAULT_PORT, _options(args))
    except Exception as e:
        if not isinstance(e, CertViewerError):
            logger.debug("unexpected failure", exc_info=True)
        print(f"❌ {_error_category(e)}: {e}", file=sys.stderr)
        return 1

    print(render_text(inspection, show_port=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
