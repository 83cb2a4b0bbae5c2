"""
Broadcast engine for Platformer Sync.
Snapshots the world and fans it out to every connected client, on demand
and on a fixed timer.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass

from fastapi import status
from starlette.websockets import WebSocketState

from platformer_sync.websocket.registry import ConnectionInfo
from platformer_sync.world.state import World

logger = logging.getLogger(__name__)


@dataclass
class BroadcastStats:
    """Statistics for one broadcast."""

    sequence: int
    trigger: str
    duration_ms: float
    recipients: int
    failures: int


class BroadcastEngine:
    """
    Sends the full world state to every registered connection.

    The world lock is held only while the snapshot is copied; sends run
    afterwards, concurrently, each bounded by send_timeout. Connections whose
    send fails are evicted from the world.
    """

    def __init__(
        self,
        world: World,
        interval_ms: int,
        send_timeout: float = 5.0,
    ) -> None:
        self._world = world
        self._interval_ms = interval_ms
        self._send_timeout = send_timeout

        self._sequence = 0
        self._failed_sends = 0
        self._is_running = False
        self._is_paused = False
        self._task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

        self._recent_stats: list[BroadcastStats] = []
        self._max_stats_history = 100

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def broadcast_count(self) -> int:
        """Number of broadcasts performed so far."""
        return self._sequence

    @property
    def failed_sends(self) -> int:
        return self._failed_sends

    @property
    def is_running(self) -> bool:
        """Whether the timer is actively broadcasting (not paused)."""
        return self._is_running and not self._is_paused

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    async def start(self) -> None:
        """Start the periodic broadcast loop."""
        if self._task is not None:
            return

        self._is_running = True
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Broadcast timer started (interval: {self._interval_ms}ms)")

    async def stop(self) -> None:
        """Stop the periodic broadcast loop."""
        if self._task is None:
            return

        self._is_running = False
        self._stop_event.set()

        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._task = None
        logger.info("Broadcast timer stopped")

    def pause(self) -> None:
        """Pause the timer. On-demand broadcasts still go out."""
        self._is_paused = True
        logger.info(f"Broadcast timer paused after broadcast {self._sequence}")

    def resume(self) -> None:
        self._is_paused = False
        logger.info(f"Broadcast timer resumed after broadcast {self._sequence}")

    async def step(self) -> None:
        """Run a single timer broadcast (when paused)."""
        if not self._is_paused:
            return

        await self.broadcast(trigger="step")

    async def _run_loop(self) -> None:
        """
        Timer loop: wait one interval, then broadcast, whether or not the
        world changed. Errors propagate.
        """
        while self._is_running:
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._interval_ms / 1000,
                )
                break
            except asyncio.TimeoutError:
                pass

            if not self._is_paused:
                await self.broadcast(trigger="timer")

    async def broadcast(self, trigger: str = "update") -> BroadcastStats:
        """Snapshot the world and send it to every registered connection."""
        start = time.perf_counter()

        snapshot = await self._world.snapshot()
        message = json.dumps(snapshot.to_dict())
        recipients = snapshot.recipients

        results = await asyncio.gather(
            *(self._send(info, message) for info in recipients)
        )
        failed = [info for info, ok in zip(recipients, results) if not ok]
        if failed:
            await self._evict(failed)

        self._sequence += 1
        duration_ms = (time.perf_counter() - start) * 1000
        stats = BroadcastStats(
            sequence=self._sequence,
            trigger=trigger,
            duration_ms=duration_ms,
            recipients=len(recipients),
            failures=len(failed),
        )
        self._recent_stats.append(stats)
        if len(self._recent_stats) > self._max_stats_history:
            self._recent_stats.pop(0)

        if duration_ms > self._interval_ms:
            logger.warning(
                f"Broadcast {self._sequence} took {duration_ms:.1f}ms "
                f"(interval: {self._interval_ms}ms)"
            )
        logger.debug(
            f"Broadcast {self._sequence} ({trigger}) to {len(recipients)} connections"
        )
        return stats

    async def _send(self, info: ConnectionInfo, message: str) -> bool:
        """Send one message to one connection. Returns False on failure."""
        try:
            await asyncio.wait_for(
                info.websocket.send_text(message),
                timeout=self._send_timeout,
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Timeout sending to player {info.player_id}")
        except Exception as e:
            logger.warning(f"Failed to send to {info.player_id}: {e}")
        self._failed_sends += 1
        return False

    async def _evict(self, failed: list[ConnectionInfo]) -> None:
        """Drop connections that could not be sent to and close their sockets."""
        removed = await self._world.evict(failed)
        for info in removed:
            logger.warning(
                f"Evicted player {info.player_id} [conn_id={info.connection_id}] "
                f"after failed send"
            )
            if info.websocket.application_state == WebSocketState.CONNECTED:
                try:
                    await info.websocket.close(code=status.WS_1011_INTERNAL_ERROR)
                except Exception as e:
                    logger.debug(f"Close after failed send for {info.player_id}: {e}")

    def get_recent_stats(self) -> list[BroadcastStats]:
        """Get recent broadcast statistics."""
        return list(self._recent_stats)
