"""Per-path debounce / dedup scheduler.

Each path moves through ``IDLE -> PENDING -> IN_FLIGHT -> IDLE``.
A repeated request while PENDING restarts the timer instead of queueing
a second action; a request while IN_FLIGHT is dropped. All state lives
on one asyncio loop and is only touched from callbacks running on it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)


class PathState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    IN_FLIGHT = "in_flight"


@dataclass
class StagingRequest:
    """The single logical request held for a path."""

    path: str
    requested_at: float
    cancelled: bool = False  # set by cleanup; the job must stop acting on it


@dataclass
class PendingState:
    request: StagingRequest
    timer: Optional[asyncio.TimerHandle] = None
    in_flight: bool = False
    task: Optional[asyncio.Task] = None

    def stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


Job = Callable[[StagingRequest], Awaitable[None]]


class Scheduler:
    """Coalesce bursts of requests per path into one deferred job run."""

    def __init__(
        self,
        job: Job,
        delay_ms: int = 500,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._job = job
        self.delay_ms = delay_ms
        self._loop = loop
        self._states: Dict[str, PendingState] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._idle: Optional[asyncio.Event] = None

    # ---- queries ----

    @property
    def pending_count(self) -> int:
        return len(self._states)

    @property
    def active_timers(self) -> int:
        return sum(1 for entry in self._states.values() if entry.timer is not None)

    def get(self, path: str) -> Optional[PendingState]:
        return self._states.get(path)

    def state(self, path: str) -> PathState:
        entry = self._states.get(path)
        if entry is None:
            return PathState.IDLE
        return PathState.IN_FLIGHT if entry.in_flight else PathState.PENDING

    # ---- transitions ----

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _idle_event(self) -> asyncio.Event:
        if self._idle is None:
            self._idle = asyncio.Event()
            if not self._states:
                self._idle.set()
        return self._idle

    def request(self, path: str) -> PathState:
        """Register a request for *path* and return the state it is now in."""
        loop = self._get_loop()
        delay = max(self.delay_ms, 0) / 1000.0
        entry = self._states.get(path)

        if entry is not None:
            if entry.in_flight:
                logger.debug("Staging already in flight for %s, request dropped", path)
                return PathState.IN_FLIGHT
            entry.request.requested_at = loop.time()
            entry.stop_timer()
            entry.timer = loop.call_later(delay, self._fire, path, entry)
            logger.debug("Debounce timer reset for %s", path)
            return PathState.PENDING

        entry = PendingState(request=StagingRequest(path=path, requested_at=loop.time()))
        self._states[path] = entry
        self._idle_event().clear()

        if self.delay_ms <= 0:
            self._start(path, entry)
            return PathState.IN_FLIGHT

        entry.timer = loop.call_later(delay, self._fire, path, entry)
        return PathState.PENDING

    def _fire(self, path: str, entry: PendingState) -> None:
        if self._states.get(path) is not entry:
            return
        entry.timer = None
        self._start(path, entry)

    def _start(self, path: str, entry: PendingState) -> None:
        entry.in_flight = True
        task = self._get_loop().create_task(self._run(path, entry))
        entry.task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, path: str, entry: PendingState) -> None:
        try:
            await self._job(entry.request)
        except Exception:
            logger.exception("Staging job for %s failed", path)
        finally:
            self._release(path, entry)

    def _release(self, path: str, entry: PendingState) -> None:
        entry.stop_timer()
        if self._states.get(path) is entry:
            del self._states[path]
        if not self._states and self._idle is not None:
            self._idle.set()

    def cleanup(self) -> None:
        """Drop every timer and every per-path entry right now.

        In-flight jobs keep running; their requests are marked cancelled
        so they stop before reporting anything.
        """
        for entry in self._states.values():
            entry.stop_timer()
            entry.request.cancelled = True
        count = len(self._states)
        self._states.clear()
        if self._idle is not None:
            self._idle.set()
        if count:
            logger.debug("Scheduler cleanup discarded %d pending path(s)", count)

    async def wait_idle(self) -> None:
        """Wait until no path is pending or in flight and all jobs have finished."""
        await self._idle_event().wait()
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
