"""
Quick sanity run: hammer a URL with a handful of workers and print the breakdown.
Run: uv run examples/smoke_local.py http://localhost:8080/
"""
import asyncio
import os
import sys

from downpour import AiohttpClient, PrintMode, ProgramArgs, run
from downpour.rendering import ProgressPrinter, render_report


async def main(url: str):
    args = ProgramArgs(
        url,
        concurrency=int(os.getenv("DOWNPOUR_CONCURRENCY", "8")),
        total_requests=int(os.getenv("DOWNPOUR_REQUESTS", "200")),
        print_mode=PrintMode.MULTILINE,
    )
    async with AiohttpClient(pool_size=args.effective_concurrency + 10, timeout_s=10.0) as client:
        with ProgressPrinter(args.print_mode, total=args.total_requests) as printer:
            report = await run(args, client, progress_callback=printer)
    print(render_report(report) or "No errors.")
    print("\nReport:", report)

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080/"))
