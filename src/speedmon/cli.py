from typing import List, Optional

import sys
import asyncio
import logging
import argparse

from .constants import REQUEST_TIMEOUT, MIN_PAYLOAD_WINDOWS, RESOLUTION
from .core import ThroughputMeter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speedmon",
        description="Measure download speed from a single HTTP payload.",
        epilog=f"Payload should be larger than {MIN_PAYLOAD_WINDOWS * RESOLUTION // (1024 * 1024)} megabytes"
    )
    parser.add_argument("url", help="URL of the payload, https:// is assumed when no scheme is given")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT, help="Total request timeout in seconds")
    parser.add_argument(
        "--allow-partial",
        action="store_true",
        help="Aggregate the samples collected so far if the stream fails mid-download"
    )
    return parser


async def measure(url: str, request_timeout: float, allow_partial: bool):
    async with ThroughputMeter(request_timeout=request_timeout, aggregate_partial_on_error=allow_partial) as meter:
        return await meter.run(url)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.INFO)

    if not args.url:
        print("Usage: speedmon <https://payload.url>", file=sys.stderr)
        return 1

    result = asyncio.run(measure(args.url, args.timeout, args.allow_partial))

    if not result.ok:
        print(f"Measurement failed. {result.error_string}", file=sys.stderr)
        return 1

    print(f"{result.speed_mbps} megabits per second")
    return 0


__all__ = ["main", "build_parser"]
