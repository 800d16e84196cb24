import asyncio
import logging
import os
import signal
import time

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Time Helpers
# ────────────────────────────────


def now() -> float:
    return time.perf_counter()


# ────────────────────────────────
# Failure Descriptions
# ────────────────────────────────


def _exception_chain(exc: BaseException):
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def describe_failure(exc: BaseException) -> str:
    """Flatten an exception (and its causes) into one searchable line.

    aiohttp wraps socket errors and keeps only a short message, so the
    OS wording for every errno in the chain is appended as well, e.g.
    ``"Cannot connect to host ... | ClientConnectorError | Connection refused"``.
    """
    parts: list[str] = []
    for err in _exception_chain(exc):
        text = str(err).strip()
        if text and text not in parts:
            parts.append(text)
        name = type(err).__name__
        if name not in parts:
            parts.append(name)
        errno = getattr(err, "errno", None)
        if isinstance(err, OSError) and isinstance(errno, int) and errno > 0:
            reason = os.strerror(errno)
            if reason not in parts:
                parts.append(reason)
    return " | ".join(parts)


# ────────────────────────────────
# Signal Handling
# ────────────────────────────────


class InterruptSignal:
    """Turns SIGINT/SIGTERM into a set ``asyncio.Event`` for the running loop."""

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, event: asyncio.Event | None = None):
        self.event = event or asyncio.Event()
        self.received: int | None = None
        self._installed: list[int] = []

    def install(self) -> asyncio.Event:
        loop = asyncio.get_running_loop()
        for sig in self.SIGNALS:
            try:
                loop.add_signal_handler(sig, self._handle, sig)
                self._installed.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handlers not supported for {sig!r} on this platform")
        return self.event

    def uninstall(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._installed:
            loop.remove_signal_handler(sig)
        self._installed.clear()

    def _handle(self, signum: int) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}, stopping run")
        self.received = signum
        self.event.set()

    def __enter__(self) -> asyncio.Event:
        return self.install()

    def __exit__(self, *exc_info) -> None:
        self.uninstall()
