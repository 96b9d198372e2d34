"""
Polling driver: re-fetch a pollable resource until it reaches a terminal state.

A session is a sequential loop with two states, ``POLLING`` and ``DONE``:

  1. Fetch the current snapshot (``poll_once``)
  2. If ``is_in_terminal_state()`` holds, stop and return it
  3. Otherwise wait ``interval`` and repeat

The overall budget (``max_wait``) is measured from session start and is not
reset by retries. Errors whose type is in ``retry_on`` (by default only the
"not visible yet" 404 right after creation) are retried inside that budget;
anything else ends the session immediately.

Outcomes are always explicit: a terminal snapshot, a ``PollingTimeoutError``
carrying the last snapshot seen, a ``ResourceNotFoundError`` if the resource
never became visible, or the error that ended the session.
"""

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from payflow.audit.logger import AuditEntry, log_event
from payflow.config import settings
from payflow.engine.errors import (
    PollingSessionError,
    PollingTimeoutError,
    ResourceNotFoundError,
    ResourceNotVisibleError,
)
from payflow.engine.pollable import Pollable
from payflow.models.payment import is_valid_transition

logger = logging.getLogger("payflow.polling")

T = TypeVar("T")

DEFAULT_RETRY_ON: tuple[type[BaseException], ...] = (ResourceNotVisibleError,)


class PollingState(str, Enum):
    POLLING = "polling"
    DONE = "done"


def _status_kind(snapshot: Any):
    return getattr(getattr(snapshot, "status", None), "kind", None)


def _status_value(snapshot: Any) -> Optional[str]:
    kind = _status_kind(snapshot)
    return kind.value if kind is not None else None


class PollingSession(Generic[T]):
    """
    One polling session over one pollable resource.

    Sessions share no state, so any number of them can run concurrently.
    ``run()`` may only be awaited once: a session surfaces at most one
    terminal snapshot.
    """

    def __init__(
        self,
        pollable: Pollable[T],
        transport: Any,
        *,
        interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        retry_on: tuple[type[BaseException], ...] = DEFAULT_RETRY_ON,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval = settings.poll_interval_seconds if interval is None else interval
        self.max_wait = settings.poll_max_wait_seconds if max_wait is None else max_wait
        self.retry_on = retry_on
        self.session_id = uuid.uuid4().hex[:12]
        self.state = PollingState.POLLING
        self.attempts = 0
        self.last_snapshot: Optional[T] = None
        self.result: Optional[T] = None
        self.trail: list[AuditEntry] = []

        self._pollable = pollable
        self._transport = transport
        self._sleep = sleep
        self._clock = clock
        self._started = False

    @property
    def resource_id(self) -> Optional[str]:
        return getattr(self._pollable, "id", None)

    def _audit(self, action: str, **details: Any) -> None:
        log_event(self.trail, action, session_id=self.session_id, payment_id=self.resource_id, details=details)

    def _observe(self, snapshot: T) -> None:
        previous = _status_kind(self.last_snapshot)
        current = _status_kind(snapshot)
        if previous is not None and current is not None and not is_valid_transition(previous, current):
            logger.warning(
                "Session %s: unexpected status transition %s -> %s for %s",
                self.session_id,
                previous.value,
                current.value,
                self.resource_id,
            )
        self.last_snapshot = snapshot
        self._audit(
            "snapshot_observed",
            attempt=self.attempts,
            status=current.value if current is not None else None,
        )

    async def run(self) -> T:
        """
        Poll until a terminal snapshot is observed.

        Returns:
            The first snapshot for which ``is_in_terminal_state()`` is true.

        Raises:
            PollingTimeoutError: Budget elapsed; carries the last snapshot seen.
            ResourceNotFoundError: The resource never became visible.
            PollingSessionError: The session was already run.
        """
        if self._started:
            raise PollingSessionError(f"Polling session {self.session_id} already ran")
        self._started = True

        started_at = self._clock()
        self._audit("poll_started", interval=self.interval, max_wait=self.max_wait)

        try:
            return await self._loop(started_at)
        except asyncio.CancelledError:
            self.state = PollingState.DONE
            self._audit("poll_cancelled", attempts=self.attempts)
            raise

    async def _loop(self, started_at: float) -> T:
        last_error: Optional[BaseException] = None

        while True:
            self.attempts += 1
            try:
                snapshot = await self._pollable.poll_once(self._transport)
            except self.retry_on as e:
                last_error = e
                self._audit("retriable_error", attempt=self.attempts, error=str(e))
            except Exception as e:
                self.state = PollingState.DONE
                self._audit("poll_failed", attempt=self.attempts, error=str(e))
                raise
            else:
                last_error = None
                self._observe(snapshot)
                if snapshot.is_in_terminal_state():
                    self.state = PollingState.DONE
                    self.result = snapshot
                    self._audit("poll_completed", attempts=self.attempts, status=_status_value(snapshot))
                    return snapshot

            elapsed = self._clock() - started_at
            remaining = self.max_wait - elapsed
            if remaining <= 0:
                self.state = PollingState.DONE
                self._audit("poll_timed_out", attempts=self.attempts, elapsed=round(elapsed, 3))
                if self.last_snapshot is None and isinstance(last_error, ResourceNotVisibleError):
                    raise ResourceNotFoundError(last_error.resource_id, self.attempts) from last_error
                raise PollingTimeoutError(self.last_snapshot, self.attempts, elapsed) from last_error

            sleep_for = min(self.interval, remaining)
            if last_error is not None:
                logger.warning(
                    "Retriable error on attempt %d for %s: %s; sleeping %.1fs",
                    self.attempts,
                    self.resource_id,
                    last_error,
                    sleep_for,
                )
            await self._sleep(sleep_for)


async def poll_until_terminal(
    pollable: Pollable[T],
    transport: Any,
    **kwargs: Any,
) -> T:
    """Run a fresh ``PollingSession`` over ``pollable`` and return its terminal snapshot."""
    return await PollingSession(pollable, transport, **kwargs).run()
