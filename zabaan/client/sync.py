"""
Client-side queue for XP earned while offline.

Transactions are stamped with a uuid idempotency key when queued and posted
to ``/api/xp/sync`` in batches. The server skips keys it has already seen, so
a batch that was applied but whose response was lost can be resent safely.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

SYNC_PATH = "/api/xp/sync"
MAX_BATCH = 100


@dataclass
class QueuedTransaction:
    amount: int
    source: str
    idempotency_key: str
    timestamp: int
    lesson_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class XpSyncQueue:
    """In-memory XP queue with a periodic background flush."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        interval: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self.interval = interval
        self.online = True
        self.last_sync_at: float | None = None
        self.last_error: str | None = None
        self._queue: list[QueuedTransaction] = []
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    async def close(self) -> None:
        self.stop()
        await self.client.aclose()

    def queue(
        self,
        amount: int,
        source: str,
        lesson_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> QueuedTransaction:
        """Add a transaction and start syncing if we are online."""
        tx = QueuedTransaction(
            amount=amount,
            source=source,
            idempotency_key=str(uuid.uuid4()),
            timestamp=int(time.time() * 1000),
            lesson_id=lesson_id,
            metadata=metadata or {},
        )
        self._queue.append(tx)
        logger.debug("Queued %d XP (%s), %d pending", amount, source, len(self._queue))
        if self.online:
            self.start()
        return tx

    def start(self) -> None:
        """Run the flush loop unless it is already running."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        # Flush now, then every interval until the queue drains or we go offline
        while self.online:
            await self.flush()
            if not self._queue:
                return
            await asyncio.sleep(self.interval)

    async def flush(self) -> bool:
        """Send pending transactions; True when the queue ended up empty."""
        async with self._lock:
            if not self._queue or not self.online:
                return not self._queue

            batch = self._queue[:MAX_BATCH]
            try:
                response = await self.client.post(SYNC_PATH, json={"transactions": [tx.to_dict() for tx in batch]})
                response.raise_for_status()
            except httpx.HTTPError as exc:
                self.last_error = str(exc)
                logger.warning("XP sync failed, %d transactions kept: %s", len(self._queue), exc)
                return False

            sent = {tx.idempotency_key for tx in batch}
            self._queue = [tx for tx in self._queue if tx.idempotency_key not in sent]
            self.last_sync_at = time.time()
            self.last_error = None
            data = response.json()
            logger.info("XP sync: %s applied, %s duplicates", data.get("applied"), data.get("duplicates"))
            return not self._queue

    def set_online(self, online: bool) -> None:
        was_online = self.online
        self.online = online
        if online and not was_online and self._queue:
            logger.info("Back online, syncing %d transactions", len(self._queue))
            self.start()

    async def force_sync_now(self) -> bool:
        return await self.flush()

    def clear(self) -> None:
        self._queue.clear()

    def status(self) -> dict[str, Any]:
        return {
            "pending": len(self._queue),
            "pending_xp": sum(tx.amount for tx in self._queue),
            "online": self.online,
            "syncing": self._task is not None and not self._task.done(),
            "last_sync_at": self.last_sync_at,
            "last_error": self.last_error,
        }

    @property
    def pending(self) -> list[QueuedTransaction]:
        return list(self._queue)
