#!/usr/bin/env python3
# cli.py: command line entry point for Downpour

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from downpour.client import AiohttpClient
from downpour.core import run
from downpour.logging_config import setup_logging
from downpour.models import PrintMode, ProgramArgs, RunReport
from downpour.rendering import ProgressPrinter, render_report
from downpour.utils import InterruptSignal

EXIT_INTERRUPTED = 130
# Extra idle connections on top of the worker count
POOL_HEADROOM = 10


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="downpour",
        description="🌧️ Downpour: fire a fixed number of GET requests at a URL with bounded concurrency",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("url", help="Target URL to GET")

    # Load shape
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=_env_int("DOWNPOUR_CONCURRENCY", 1),
        help="Number of parallel workers",
    )
    parser.add_argument(
        "-n",
        "--requests",
        type=int,
        default=_env_int("DOWNPOUR_REQUESTS", 1),
        help="Overall number of requests to run",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=_env_float("DOWNPOUR_TIMEOUT_S"),
        help="Total per-request timeout in seconds (none by default)",
    )

    # Output
    parser.add_argument(
        "-p",
        "--print-mode",
        choices=[m.value for m in PrintMode],
        default=PrintMode.INLINE.value,
        help="Rewrite one progress line, print one line per update, or show a progress bar",
    )

    # Logging & Debugging
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., downpour.log)",
    )

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> tuple[argparse.Namespace, ProgramArgs]:
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        program_args = ProgramArgs(
            url=ns.url,
            concurrency=ns.concurrency,
            total_requests=ns.requests,
            print_mode=PrintMode(ns.print_mode),
        )
    except ValueError as e:
        parser.error(str(e))
    return ns, program_args


async def execute(program_args: ProgramArgs, timeout_s: Optional[float] = None) -> RunReport:
    pool_size = program_args.effective_concurrency + POOL_HEADROOM
    interrupt = InterruptSignal()
    async with AiohttpClient(pool_size=pool_size, timeout_s=timeout_s) as client:
        with interrupt as cancel, ProgressPrinter(
            program_args.print_mode, total=program_args.total_requests
        ) as printer:
            return await run(program_args, client, progress_callback=printer, cancel=cancel)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    ns, program_args = parse_args(argv)

    setup_logging(level="DEBUG" if ns.debug else "WARNING", log_file=ns.log_file)
    logging.info(
        f"Starting Downpour against {program_args.url} | "
        f"Requests: {program_args.total_requests} | Concurrency: {program_args.concurrency}"
    )

    report = asyncio.run(execute(program_args, timeout_s=ns.timeout))

    text = render_report(report)
    if text:
        print(f"\n{text}")
    print()
    return EXIT_INTERRUPTED if report.cancelled else 0


if __name__ == "__main__":
    sys.exit(main())
