import asyncio
import logging
from typing import Optional

from .models import Token

logger = logging.getLogger(__name__)

# Marks that every token has been handed out. Consumers put it back so the
# next waiting worker observes exhaustion too.
_EXHAUSTED = object()


class TokenSource:
    """Hands out exactly ``total`` tokens to any number of consumers, then closes.

    Tokens are not paced: the background task refills a one-slot queue as soon
    as a consumer takes the previous token, so the only limit is the total.
    """

    def __init__(self, total: int, name: str = "") -> None:
        if total < 0:
            raise ValueError(f"total must be >= 0, got {total}")
        self.total = total
        self.name = name
        self.issued = 0
        self.q: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._task: Optional[asyncio.Task] = None
        logger.debug(f"Created token source '{name}': total={total}")

    @property
    def exhausted(self) -> bool:
        return self.issued >= self.total

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.debug(f"Token source '{self.name}' started")

    def stop(self) -> None:
        """Cancel the feeder task without waiting for it."""
        if self._task:
            self._task.cancel()
            self._task = None
            logger.debug(f"Token source '{self.name}' stopped after {self.issued} tokens")

    async def acquire(self) -> Optional[Token]:
        """Wait for the next token; ``None`` once all tokens are gone."""
        item = await self.q.get()
        if item is _EXHAUSTED:
            self.q.put_nowait(_EXHAUSTED)
            return None
        return item

    async def _run(self) -> None:
        try:
            for seq in range(self.total):
                await self.q.put(Token(seq))
                self.issued += 1
            await self.q.put(_EXHAUSTED)
            logger.debug(f"Token source '{self.name}' exhausted ({self.issued} issued)")
        except asyncio.CancelledError:
            logger.debug(f"Token source '{self.name}' run loop cancelled")
            raise
