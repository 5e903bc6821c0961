"""
curlstream CLI entry point.

Stream a URL's body to a file or stdout through a ResponseStream.

Usage::

    python -m curlstream https://example.org/data.bin -o data.bin
    python -m curlstream https://example.org/ -H "Accept: text/html" --timeout 30

Options:
    -o, --output       Write the body to this file (default: stdout)
    -H, --header       Extra request header "Name: value" (can be repeated)
    --chunk-size       Bytes requested per read (default: 65536)
    --no-follow        Do not follow redirects
    --timeout          Whole-transfer timeout in seconds
    --connect-timeout  Connection timeout in seconds
    --insecure         Skip TLS certificate verification
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, cast

from curlstream.client import open_stream
from curlstream.curl import CurlTransfer, RequestOptions
from curlstream.exceptions import TransferError

DEFAULT_CHUNK_SIZE = 64 * 1024

logger = logging.getLogger(__name__)

LOG_DATEFMT = "%H:%M:%S"
"""Timestamp format for log lines; downloads are short-lived."""

_RESET = "\x1b[0m"
_DIM = "\x1b[2m"

_LEVEL_COLORS = {
    logging.DEBUG: "\x1b[38;5;244m",
    logging.INFO: "\x1b[38;5;40m",
    logging.WARNING: "\x1b[38;5;220m",
    logging.ERROR: "\x1b[38;5;196m",
    logging.CRITICAL: "\x1b[38;5;196;1m",
}


class ColoredFormatter(logging.Formatter):
    """Color the level name by severity and dim the timestamp and logger name."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelno, _RESET)
        timestamp = self.formatTime(record, self.datefmt)
        return (
            f"{_DIM}{timestamp}{_RESET} {color}{record.levelname:<8}{_RESET} "
            f"{_DIM}{record.name}{_RESET}: {record.getMessage()}"
        )


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Send log records to stderr. Debug output only with *verbose*."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if no_color or not sys.stderr.isatty():
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", LOG_DATEFMT)
        )
    else:
        handler.setFormatter(ColoredFormatter(datefmt=LOG_DATEFMT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def positive_float(value: str) -> float:
    """argparse type for strictly positive seconds."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a number of seconds, got {value}") from None
    if not 0 < number < float("inf"):
        raise argparse.ArgumentTypeError(f"Expected a positive number of seconds, got {value}")
    return number


def parse_header(value: str) -> tuple[str, str]:
    """
    Split a ``Name: value`` header argument.

    Raises:
        argparse.ArgumentTypeError: If there is no colon or the name is empty.
    """
    name, sep, content = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Invalid header {value!r}, expected 'Name: value'")
    return name.strip(), content.strip()


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got {value}")
    return number


def download(url: str, sink: BinaryIO, options: RequestOptions, chunk_size: int) -> int:
    """
    Copy the body of *url* into *sink*.

    Returns:
        Number of bytes written.
    """
    with open_stream(url, options) as stream:
        while chunk := stream.read(chunk_size):
            sink.write(chunk)

        logger.info(
            "Fetched %s: response code %d, %d bytes",
            url,
            cast(CurlTransfer, stream.transfer).response_code,
            stream.length,
        )
        return stream.length


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="curlstream",
        description="Stream a URL through libcurl",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("url", help="URL to fetch")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the body to this file (default: stdout)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        dest="headers",
        type=parse_header,
        help="Extra request header 'Name: value' (can be repeated)",
    )
    parser.add_argument(
        "--chunk-size",
        type=positive_int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Bytes requested per read (default: {DEFAULT_CHUNK_SIZE})",
    )
    parser.add_argument(
        "--no-follow",
        action="store_true",
        help="Do not follow redirects",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        help="Whole-transfer timeout in seconds",
    )
    parser.add_argument(
        "--connect-timeout",
        type=positive_float,
        default=None,
        help="Connection timeout in seconds",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    options = RequestOptions(
        follow_redirects=not args.no_follow,
        connect_timeout_secs=args.connect_timeout,
        timeout_secs=args.timeout,
        headers=dict(args.headers),
        verify_tls=not args.insecure,
    )

    try:
        if args.output is None:
            download(args.url, sys.stdout.buffer, options, args.chunk_size)
            sys.stdout.flush()
        else:
            with args.output.open("wb") as sink:
                download(args.url, sink, options, args.chunk_size)
    except TransferError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
