import asyncio
import logging
from typing import Optional

import aiohttp

from .classifier import DEFAULT_SIGNATURES, classify_failure
from .client import HttpClient
from .metrics import ProgressCallback, RunState, build_report
from .models import Category, Outcome, ProgramArgs, RunReport, SignatureTable
from .throttling import TokenSource
from .utils import describe_failure

logger = logging.getLogger(__name__)


class LoadRunner:
    """Issues ``total_requests`` GETs against one URL with bounded concurrency.

    Workers pull tokens from a ``TokenSource`` and push one ``Outcome`` per
    request onto a queue. A single aggregator loop owns the ``RunState``
    and stops when every request has been counted or ``cancel`` is set.
    """

    def __init__(
        self,
        args: ProgramArgs,
        client: HttpClient,
        progress_callback: Optional[ProgressCallback] = None,
        signatures: SignatureTable = DEFAULT_SIGNATURES,
    ) -> None:
        self.args = args
        self.client = client
        self.progress_callback = progress_callback
        self.signatures = signatures
        self.workers = args.effective_concurrency

        self.tokens = TokenSource(args.total_requests, name=args.url)
        self.outcomes: asyncio.Queue[Outcome] = asyncio.Queue()
        self._worker_tasks: list[asyncio.Task] = []

        logger.info(
            f"Initialized runner for {args.url}: "
            f"requests={args.total_requests}, concurrency={args.concurrency}, "
            f"workers={self.workers}"
        )

    # ────────────────────────────────
    # Worker
    # ────────────────────────────────

    async def _attempt(self, worker_id: int) -> Outcome:
        try:
            status = await self.client.get(self.args.url)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            description = describe_failure(e)
            category = classify_failure(description, self.signatures)
            if category is Category.UNKNOWN:
                logger.warning(f"[W{worker_id}] Unclassified transport error: {description}")
            return Outcome(category)
        except Exception as e:
            logger.error(f"[W{worker_id}] Unexpected error fetching {self.args.url}: {describe_failure(e)}")
            return Outcome(Category.UNKNOWN)

        if status != 200:
            return Outcome(Category.HTTP, status)
        return Outcome(Category.SUCCESS)

    async def _worker(self, worker_id: int) -> None:
        while True:
            token = await self.tokens.acquire()
            if token is None:
                break
            outcome = await self._attempt(worker_id)
            logger.debug(f"[W{worker_id}] Request #{token.seq}: {outcome.category.name}")
            self.outcomes.put_nowait(outcome)
        logger.debug(f"Worker {worker_id} stopped")

    # ────────────────────────────────
    # Aggregator
    # ────────────────────────────────

    def _count(self, state: RunState, outcome: Outcome) -> None:
        state.record(outcome)
        if self.progress_callback:
            self.progress_callback(state)

    async def _aggregate(self, state: RunState, cancel: asyncio.Event) -> bool:
        """Count outcomes until done. Returns True if cancelled first."""
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            while not state.done:
                if cancel.is_set():
                    return True
                next_outcome = asyncio.ensure_future(self.outcomes.get())
                done, _ = await asyncio.wait(
                    {next_outcome, cancelled}, return_when=asyncio.FIRST_COMPLETED
                )
                if next_outcome in done:
                    # Already dequeued, so it is counted even when cancel won the race
                    self._count(state, next_outcome.result())
                else:
                    next_outcome.cancel()
                if cancelled in done:
                    return True
            return False
        finally:
            cancelled.cancel()

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    def _abandon(self) -> None:
        self.tokens.stop()
        pending = [w for w in self._worker_tasks if not w.done()]
        for w in pending:
            w.cancel()
        if pending:
            logger.debug(f"Abandoned {len(pending)} in-flight workers")

    async def run(self, cancel: Optional[asyncio.Event] = None) -> RunReport:
        cancel = cancel or asyncio.Event()
        state = RunState(self.args.total_requests)

        if self.workers > 0:
            await self.tokens.start()
            self._worker_tasks = [
                asyncio.create_task(self._worker(i)) for i in range(self.workers)
            ]
            logger.info(
                f"Starting {self.args.total_requests} requests with {self.workers} workers"
            )

        try:
            was_cancelled = await self._aggregate(state, cancel)
        finally:
            self._abandon()

        return build_report(state, self.workers, cancelled=was_cancelled)


async def run(
    args: ProgramArgs,
    client: HttpClient,
    progress_callback: Optional[ProgressCallback] = None,
    cancel: Optional[asyncio.Event] = None,
    signatures: SignatureTable = DEFAULT_SIGNATURES,
) -> RunReport:
    runner = LoadRunner(
        args, client, progress_callback=progress_callback, signatures=signatures
    )
    return await runner.run(cancel)
