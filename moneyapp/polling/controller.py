"""
Polling Controller

Repeatedly invokes a refresh operation on a fixed cadence while active,
publishing every outcome (result or error) as a PollEvent.

Lifecycle:
- start() schedules the loop on the running event loop; calling it again
  while running does nothing
- stop() asks the loop to end; an in-flight refresh is allowed to finish
  but no further iteration begins
- start() right after stop() waits for that in-flight refresh before the
  new run begins, so refreshes never overlap
- the controller knows nothing about app foreground/background; callers
  start and stop it

DESIGN DECISION: The wait between iterations is a wait on the stop event
with a timeout, so stop() takes effect immediately instead of after the
current sleep.

CRITICAL: A failed refresh never ends the loop. It is published with a
user-safe message and polling continues at the same fixed interval.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from moneyapp.events import EventChannel
from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.observability import ActivityLogger
from moneyapp.services.api.errors import user_message_for


T = TypeVar("T")


@dataclass
class PollEvent(Generic[T]):
    """Outcome of one polling iteration."""
    iteration: int
    result: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None
    completed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def succeeded(self) -> bool:
        return self.error is None


class PollingController(Generic[T]):
    """Fixed-interval poller on asyncio."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[T]],
        interval_seconds: float,
        fire_immediately: bool = True,
        channel: Optional[EventChannel[PollEvent[T]]] = None,
        activity: Optional[ActivityLogger] = None,
        name: str = "poller",
    ):
        """
        Args:
            refresh: Coroutine function producing one result per call.
            interval_seconds: Pause between the end of one iteration and
                              the start of the next.
            fire_immediately: Run the first iteration on start() instead
                              of after the first interval.
            channel: Where PollEvents are published. A private channel is
                     created when omitted.
            activity: Observability sink.
            name: Poller name used in logs.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._refresh = refresh
        self._interval = interval_seconds
        self._fire_immediately = fire_immediately
        self._channel = channel or EventChannel(name)
        self._activity = activity or ActivityLogger()
        self._name = name

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._iterations = 0
        self._last_result: Optional[T] = None
        self._last_error: Optional[Exception] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def channel(self) -> EventChannel[PollEvent[T]]:
        return self._channel

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def last_result(self) -> Optional[T]:
        return self._last_result

    @property
    def last_error(self) -> Optional[Exception]:
        return self._last_error

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """
        Begin polling.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        if self.is_running:
            return
        loop = asyncio.get_running_loop()

        # Each run gets its own stop event so a stopping run cannot be revived
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        previous = self._task if self._task is not None and not self._task.done() else None
        self._task = loop.create_task(
            self._run(stop_event, previous), name=f"poll:{self._name}"
        )
        self._activity.log_info(
            "polling_started",
            category="Polling",
            poller=self._name,
            interval_seconds=self._interval,
            fire_immediately=self._fire_immediately,
        )

    def stop(self) -> None:
        """Stop polling. Safe to call when not running."""
        if self._stop_event is None or self._stop_event.is_set():
            return
        self._stop_event.set()
        self._activity.log_info(
            "polling_stopped",
            category="Polling",
            poller=self._name,
            iterations=self._iterations,
        )

    async def wait_stopped(self) -> None:
        """Wait until the current run, and any earlier run it follows, has exited."""
        if self._task is not None:
            await self._task

    # =========================================================================
    # LOOP
    # =========================================================================

    async def _run(
        self,
        stop_event: asyncio.Event,
        previous: Optional[asyncio.Task] = None,
    ) -> None:
        # A stopped run may still be inside its last refresh
        if previous is not None:
            await asyncio.wait([previous])
        if not self._fire_immediately and await self._wait(stop_event):
            return
        while not stop_event.is_set():
            await self.poll_once()
            if await self._wait(stop_event):
                return

    async def _wait(self, stop_event: asyncio.Event) -> bool:
        """Sleep one interval. Returns True if stop was requested."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            pass
        return stop_event.is_set()

    async def poll_once(self) -> PollEvent[T]:
        """Run one iteration and publish its outcome."""
        self._iterations += 1
        iteration = self._iterations

        try:
            result = await self._refresh()
        except Exception as e:
            self._last_error = e
            event = PollEvent(iteration=iteration, error=e, message=user_message_for(e))
            kind = getattr(e, "kind", None)
            self._activity.log(
                ActivityEventBuilder.poll_failed(
                    self._name,
                    kind.value if kind is not None else type(e).__name__,
                    iteration,
                )
            )
        else:
            self._last_result = result
            self._last_error = None
            event = PollEvent(iteration=iteration, result=result)

        await self._channel.publish(event)
        return event
