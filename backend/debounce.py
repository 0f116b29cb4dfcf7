import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config import BREAKDOWN_DEBOUNCE_S

logger = logging.getLogger(__name__)

# Drafts this short are still being typed and never get a breakdown
MIN_DRAFT_LENGTH = 10


class DraftBreakdown:
    """
    Live breakdown preview for the text being typed into the add box.

    Every submit() cancels the pending timer and starts a new one for the latest
    snapshot. When a timer fires, drafts longer than MIN_DRAFT_LENGTH that differ
    from the last processed text are broken down; shorter drafts clear the preview.
    """

    def __init__(
        self,
        generate: Callable[[str], Awaitable[list[str]]],
        delay_s: float = BREAKDOWN_DEBOUNCE_S,
    ):
        self.generate = generate
        self.delay_s = delay_s
        self.text = ""
        self.items: list[str] = []
        self._last_processed = ""
        self._timer: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def submit(self, text: str) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire_later(text.strip()))

    def cancel(self) -> None:
        if self.pending:
            self._timer.cancel()

    async def wait(self) -> None:
        """Wait for the current timer (and its breakdown) to finish."""
        if self._timer is not None:
            await asyncio.wait({self._timer})

    async def _fire_later(self, snapshot: str) -> None:
        await asyncio.sleep(self.delay_s)

        if len(snapshot) <= MIN_DRAFT_LENGTH:
            self.text = snapshot
            self.items = []
            self._last_processed = ""
            return
        if snapshot == self._last_processed:
            return

        items = await self.generate(snapshot)
        self._last_processed = snapshot
        self.text = snapshot
        self.items = items
        logger.debug("Draft breakdown for %r: %d item(s)", snapshot, len(items))
