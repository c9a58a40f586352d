"""
Request coalescing for reaction reads.

Many reaction widgets on one page ask for their counts at nearly the same
time. The batcher collects those requests for a short window and issues one
batch read per viewer identity instead of one read per widget.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Set

from ..config import config
from ..models import ReactionRow
from .store import ReactionStore, group_by_content_id


IDLE = "idle"
ACCUMULATING = "accumulating"
FLUSHING = "flushing"

# user hash key -> content id -> futures waiting on that content
PendingQueue = Dict[str, Dict[str, List["asyncio.Future[List[ReactionRow]]"]]]


class LoopScheduler:
    """
    Schedules callbacks on the running asyncio event loop.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ReactionsBatcher:
    """
    Coalesces reaction reads into one batch call per user hash and window.

    The window is fixed from the first call after a flush; later calls do
    not push the flush back. Without a scheduler (server-side rendering)
    every load is sent on its own immediately.
    """

    def __init__(self, store: ReactionStore, scheduler: Optional[LoopScheduler] = None,
                 window_ms: Optional[int] = None):
        """
        Initialize the batcher.

        Args:
            store: Reactions backend
            scheduler: Object with ``call_later(delay, callback)``; None disables batching
            window_ms: Batching window in milliseconds (defaults to config value)
        """
        self.store = store
        self.scheduler = scheduler
        self.window_ms = window_ms if window_ms is not None else config.batch_window_ms
        self._queues: PendingQueue = {}
        self._timer = None
        self._in_flight: Set["asyncio.Task[None]"] = set()

    @property
    def state(self) -> str:
        """Current phase: idle, accumulating or flushing."""
        if self._in_flight:
            return FLUSHING
        if self._timer is not None:
            return ACCUMULATING
        return IDLE

    def load(self, content_id: str, user_hash: Optional[str] = None) -> "asyncio.Future[List[ReactionRow]]":
        """
        Request the reactions of one piece of content.

        Must be called from a running event loop. Requests registered before
        a flush fires are all part of that flush.

        Args:
            content_id: Content identifier
            user_hash: Viewer identity

        Returns:
            Future resolving to the content's rows
        """
        if self.scheduler is None:
            return asyncio.ensure_future(self.store.fetch_reactions_direct(content_id, user_hash))

        future = asyncio.get_running_loop().create_future()
        queue = self._queues.setdefault(user_hash or "", {})
        queue.setdefault(content_id, []).append(future)

        self._schedule_flush()
        return future

    def _schedule_flush(self) -> None:
        if self._timer is not None:
            return
        self._timer = self.scheduler.call_later(self.window_ms / 1000.0, self._start_flush)

    def _start_flush(self) -> None:
        # Swap before anything is awaited so new loads start a fresh window
        batches = self._queues
        self._queues = {}
        self._timer = None

        task = asyncio.ensure_future(self._flush(batches))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _flush(self, batches: PendingQueue) -> None:
        if not self.store.configured:
            for queue in batches.values():
                for futures in queue.values():
                    _resolve_all(futures, [])
            return

        await asyncio.gather(*(
            self._flush_group(user_key, queue) for user_key, queue in batches.items()
        ))

    async def _flush_group(self, user_key: str, queue: Dict[str, List["asyncio.Future[List[ReactionRow]]"]]) -> None:
        content_ids = list(queue.keys())
        try:
            rows = await self.store.fetch_reactions_many(content_ids, user_key or None)
        except Exception as e:
            logging.error(f"Batch reaction read failed for {len(content_ids)} items: {e}")
            for futures in queue.values():
                for future in futures:
                    if not future.done():
                        future.set_exception(e)
            return

        grouped = group_by_content_id(rows)
        for content_id in content_ids:
            _resolve_all(queue[content_id], grouped.get(content_id, []))

    async def drain(self) -> None:
        """Wait until every dispatched flush has settled."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)


def _resolve_all(futures: List["asyncio.Future[List[ReactionRow]]"], rows: List[ReactionRow]) -> None:
    for future in futures:
        # A caller may have cancelled its future
        if not future.done():
            future.set_result(list(rows))

