"""Background poller waiting for an item's derived artifact."""
import asyncio
from typing import Awaitable, Callable, Optional, Protocol

from ..api.events import EventEmitter
from ..logging import get_logger
from .models import VerificationState


logger = get_logger('archiveflow.verification.poller')

SleepFunc = Callable[[float], Awaitable[None]]

DEFAULT_INTERVAL = 5
DEFAULT_SKIP_AFTER = 20


class ReadinessChecker(Protocol):
    """Anything able to tell whether an item finished processing."""

    async def is_ready(self, identifier: str) -> bool: ...


class DerivativePoller:
    """
    Polls an item's status until its derived artifact appears.

    One status check runs immediately on start, then one every
    ``interval_seconds`` ticks. Ticks happen once per second and advance
    ``state.elapsed_seconds``. A new check is never started while a
    previous one is still in flight.

    Events:
        tick(elapsed_seconds): after each tick
        check(ready): after each completed check
        done(state): the artifact was found
        cancelled(state): polling was stopped by the caller
    """

    def __init__(
        self,
        checker: ReadinessChecker,
        identifier: str,
        interval_seconds: int = DEFAULT_INTERVAL,
        skip_after_seconds: int = DEFAULT_SKIP_AFTER,
        sleep: SleepFunc = asyncio.sleep,
        event_emitter: Optional[EventEmitter] = None
    ):
        """
        Initialize poller.

        Args:
            checker: Readiness checker
            identifier: Item identifier to watch
            interval_seconds: Ticks between two checks
            skip_after_seconds: Skipping is offered once elapsed time exceeds this
            sleep: Coroutine used to wait one tick
            event_emitter: Event emitter receiving progress events
        """
        if interval_seconds < 1:
            raise ValueError("interval_seconds must be at least 1")

        self.checker = checker
        self.identifier = identifier
        self.interval_seconds = interval_seconds
        self.skip_after_seconds = skip_after_seconds
        self.state = VerificationState()
        self.event_emitter = event_emitter or EventEmitter('archiveflow.verification')

        self._sleep = sleep
        self._runner: Optional[asyncio.Task] = None
        self._check_task: Optional[asyncio.Task] = None
        self._finished: Optional[asyncio.Event] = None
        self._active = False

    @property
    def active(self) -> bool:
        """True while polling is running."""
        return self._active

    @property
    def can_skip(self) -> bool:
        """True once the caller may reasonably stop waiting."""
        return (
            not self.state.finished
            and self.state.elapsed_seconds > self.skip_after_seconds
        )

    def on(self, event: str, callback: Callable) -> 'DerivativePoller':
        """Registers an event handler."""
        self.event_emitter.on(event, callback)
        return self

    def start(self) -> 'DerivativePoller':
        """
        Start polling in the running event loop.

        Calling start more than once has no effect.

        Returns:
            Self for chaining
        """
        if self._runner is not None:
            return self

        logger.info(f"Waiting for {self.identifier} to finish processing")
        self._active = True
        self._finished = asyncio.Event()
        self._runner = asyncio.ensure_future(self._run())
        return self

    async def _run(self):
        """Tick loop."""
        self._schedule_check()
        while self._active:
            await self._sleep(1)
            if not self._active:
                return
            self.tick()

    def tick(self):
        """
        Advance the clock by one second.

        Starts a check every ``interval_seconds`` ticks. No-op once
        polling has stopped.
        """
        if not self._active:
            return

        self.state.elapsed_seconds += 1
        self.event_emitter.emit('tick', self.state.elapsed_seconds)

        if self.state.elapsed_seconds % self.interval_seconds == 0:
            self._schedule_check()

    def _schedule_check(self):
        """Start a status check unless one is already running."""
        if self._check_task is not None and not self._check_task.done():
            logger.debug(f"Previous check for {self.identifier} still running, skipping")
            return
        self._check_task = asyncio.ensure_future(self._check())

    async def _check(self):
        """Run one status check."""
        ready = await self.checker.is_ready(self.identifier)
        if not self._active:
            return

        self.state.checks += 1
        self.event_emitter.emit('check', ready)

        if ready:
            logger.info(f"{self.identifier} ready after {self.state.elapsed_formatted}")
            self.state.done = True
            self._stop()
            self.event_emitter.emit('done', self.state)

    def cancel(self):
        """
        Stop polling.

        No further checks or ticks happen afterwards. No-op if polling
        already finished.
        """
        if not self._active:
            return

        logger.info(f"Stopped waiting for {self.identifier} after {self.state.elapsed_formatted}")
        self.state.cancelled = True
        self._stop()
        self.event_emitter.emit('cancelled', self.state)

    def _stop(self):
        """Tear down background tasks."""
        self._active = False
        current = asyncio.current_task()
        for task in (self._runner, self._check_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
        if self._finished is not None:
            self._finished.set()

    async def wait(self) -> VerificationState:
        """
        Wait until polling finishes.

        Returns:
            Final verification state

        Raises:
            RuntimeError: If polling was never started
        """
        if self._finished is None:
            raise RuntimeError("Poller was not started")
        await self._finished.wait()
        return self.state
