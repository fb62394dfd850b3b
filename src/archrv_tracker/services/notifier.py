"""
archrv_tracker.services.notifier

Non-blocking notice pipeline in front of the chat client.

Responsibilities:
- Accept notices from workflows without waiting for delivery (`notify`).
- Batcher task: merge texts received within one tick into a single message.
- Deliverer task: send merged messages one at a time, in order; log and skip failures.
- Flush the final batch on shutdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from archrv_tracker.errors import DeliveryError, NotifierClosed
from archrv_tracker.observability.logging import get_logger

log = get_logger(__name__)

Deliver = Callable[[str], Awaitable[None]]

# Queue sentinel: "no more items after this one".
_CLOSE = object()


class Notifier:
    def __init__(self, *, deliver: Deliver, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._deliver = deliver
        self._interval = interval
        self._incoming: asyncio.Queue[object] = asyncio.Queue()
        self._outgoing: asyncio.Queue[object] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def running(self) -> bool:
        return bool(self._tasks) and not self._closed

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._batch_loop(), name="notifier-batcher"),
            asyncio.create_task(self._deliver_loop(), name="notifier-deliverer"),
        ]

    def notify(self, text: str) -> None:
        if self._closed:
            raise NotifierClosed("notifier has been shut down")
        self._incoming.put_nowait(text)

    async def aclose(self) -> None:
        """
        Stop accepting notices, flush the pending batch and wait for delivery to finish.
        """

        if self._closed:
            return
        self._closed = True
        if not self._tasks:
            return
        self._incoming.put_nowait(_CLOSE)
        await asyncio.gather(*self._tasks)

    async def _batch_loop(self) -> None:
        loop = asyncio.get_running_loop()
        pending: list[str] = []
        next_tick = loop.time() + self._interval
        while True:
            try:
                item = await asyncio.wait_for(
                    self._incoming.get(), timeout=max(0.0, next_tick - loop.time())
                )
            except TimeoutError:
                self._forward(pending)
                pending = []
                next_tick += self._interval
                # Skip ticks missed while the loop was busy instead of firing them back to back.
                if next_tick <= loop.time():
                    next_tick = loop.time() + self._interval
                continue

            if item is _CLOSE:
                self._forward(pending)
                self._outgoing.put_nowait(_CLOSE)
                return
            pending.append(str(item))

    def _forward(self, pending: list[str]) -> None:
        if pending:
            self._outgoing.put_nowait("\n".join(pending))

    async def _deliver_loop(self) -> None:
        while True:
            message = await self._outgoing.get()
            if message is _CLOSE:
                return
            text = str(message)
            try:
                await self._deliver(text)
            except DeliveryError as e:
                log.warning("notice_delivery_failed", error=e.message, length=len(text))
            except Exception:
                log.exception("notice_delivery_crashed", length=len(text))
            else:
                log.debug("notice_delivered", length=len(text))


# --- Module Notes -----------------------------------------------------------
# Each stage owns its state (the batch list, the chat client); the two queues are
# the only things shared. Ordering: texts keep enqueue order inside a merged message
# and merged messages are delivered in tick order.
