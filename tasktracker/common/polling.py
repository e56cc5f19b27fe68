"""Fixed-interval background refresh tasks.

Each poller re-fetches one resource and overwrites its cached state. Pollers
run independently of each other; stopping one only cancels its timer, never
a request another component has in flight.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional

from tasktracker.common.exceptions import AppException

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[object]]


class CachedResource:
    """Last fetched value of one screen's list, overwritten on every refresh."""

    def __init__(self, name: str, loader: RefreshCallback) -> None:
        self.name = name
        self._loader = loader
        self.value: Any = None
        self.refreshed_at: Optional[datetime] = None
        self._generation = 0

    @property
    def loaded(self) -> bool:
        return self.refreshed_at is not None

    async def refresh(self) -> Any:
        generation = self._generation
        value = await self._loader()
        # Dropped if the cache was invalidated while the load was in flight
        if generation == self._generation:
            self.value = value
            self.refreshed_at = datetime.now(timezone.utc)
        return value

    async def get(self, *, force: bool = False) -> Any:
        if force or not self.loaded:
            return await self.refresh()
        return self.value

    def invalidate(self) -> None:
        self._generation += 1
        self.value = None
        self.refreshed_at = None


def invalidate_all(caches: Iterable[CachedResource]) -> None:
    """Forget every cached screen, e.g. when the session or tenant changes."""
    for cache in caches:
        cache.invalidate()


class Poller:
    """Run *callback* once, then every *interval* seconds until stopped."""

    def __init__(
        self,
        name: str,
        callback: RefreshCallback,
        interval: float,
        *,
        run_immediately: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._run_immediately = run_immediately
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"poller:{self.name}")
        logger.debug("Poller %s started (every %.0fs)", self.name, self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Poller %s stopped", self.name)

    async def _run(self) -> None:
        if self._run_immediately:
            await self._tick()
        while True:
            await asyncio.sleep(self.interval)
            await self._tick()

    async def _tick(self) -> None:
        self.ticks += 1
        try:
            await self._callback()
        except AppException as exc:
            # Stays scheduled: the next tick picks up a fresh login.
            logger.warning("Poller %s: %s", self.name, exc.detail)
        except Exception:
            logger.exception("Poller %s failed", self.name)


class PollerGroup:
    """Named pollers started and stopped together with the application."""

    def __init__(self) -> None:
        self._pollers: dict[str, Poller] = {}

    def add(self, poller: Poller) -> Poller:
        self._pollers[poller.name] = poller
        return poller

    def get(self, name: str) -> Optional[Poller]:
        return self._pollers.get(name)

    def __iter__(self):
        return iter(self._pollers.values())

    def start_all(self) -> None:
        for poller in self._pollers.values():
            poller.start()

    async def stop_all(self) -> None:
        for poller in self._pollers.values():
            await poller.stop()
