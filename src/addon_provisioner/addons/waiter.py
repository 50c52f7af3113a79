"""Generic wait-for-state polling primitive.

A StateChangeWaiter repeatedly calls a refresh coroutine until the reported
state label reaches one of the target labels:

  refresh -> (object, state)
    state in target           -> return object
    state in pending          -> sleep poll_interval, refresh again
    anything else             -> UnexpectedState
    refresh raises            -> propagated unchanged
    object is None            -> counted as not found (NotFoundWhileWaiting
                                 after not_found_checks consecutive misses)
    timeout elapses           -> WaitTimeout

The waiter never inspects the object; it is returned as-is. Cancelling the
awaiting task cancels any in-flight refresh or sleep and propagates
``asyncio.CancelledError``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Collection, Generic, TypeVar

from ..observability import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

RefreshFunc = Callable[[], Awaitable[tuple[T | None, str]]]

DEFAULT_POLL_INTERVAL_SECONDS = 3.0
DEFAULT_NOT_FOUND_CHECKS = 20


class WaitError(Exception):
    """Base class for wait failures raised by the waiter itself."""


class WaitTimeout(WaitError):
    """The target state was not reached before the timeout elapsed."""

    def __init__(
        self,
        *,
        timeout: float,
        last_state: str | None,
        expected: Collection[str],
    ) -> None:
        self.timeout = timeout
        self.last_state = last_state
        self.expected = tuple(sorted(expected))
        super().__init__(
            f'timeout while waiting for state to become '
            f'{_labels(self.expected)} (last state: {last_state!r}, '
            f'timeout: {timeout:g}s)'
        )


class UnexpectedState(WaitError):
    """Refresh reported a state that is neither pending nor target."""

    def __init__(self, *, state: str, expected: Collection[str]) -> None:
        self.state = state
        self.expected = tuple(sorted(expected))
        super().__init__(
            f'unexpected state {state!r}, wanted target {_labels(self.expected)}'
        )


class NotFoundWhileWaiting(WaitError):
    """Refresh kept returning no object."""

    def __init__(self, *, checks: int) -> None:
        self.checks = checks
        super().__init__(
            f'couldn\'t find resource ({checks} retries)'
        )


@dataclass(slots=True)
class _WaitProgress:
    attempts: int = 0
    last_state: str | None = None


@dataclass(slots=True)
class StateChangeWaiter(Generic[T]):
    """Poll ``refresh`` until it reports one of the ``target`` states."""

    pending: Collection[str]
    target: Collection[str]
    refresh: RefreshFunc[T]
    timeout: float
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    delay: float = 0.0
    not_found_checks: int = DEFAULT_NOT_FOUND_CHECKS

    def __post_init__(self) -> None:
        self.pending = frozenset(self.pending)
        self.target = frozenset(self.target)
        if not self.target:
            raise ValueError('target must name at least one state')
        if self.timeout <= 0:
            raise ValueError('timeout must be > 0')
        if self.poll_interval < 0 or self.delay < 0:
            raise ValueError('poll_interval and delay must be >= 0')

    async def wait(self) -> T:
        """Wait for a target state and return the last refreshed object.

        Raises:
            WaitTimeout: The timeout elapsed first.
            UnexpectedState: Refresh reported an unknown state.
            NotFoundWhileWaiting: Refresh returned no object too many times.
        """
        progress = _WaitProgress()
        try:
            async with asyncio.timeout(self.timeout) as scope:
                return await self._poll(progress)
        except TimeoutError as exc:
            if not scope.expired():
                raise
            raise WaitTimeout(
                timeout=self.timeout,
                last_state=progress.last_state,
                expected=self.target,
            ) from exc

    async def _poll(self, progress: _WaitProgress) -> T:
        if self.delay:
            await asyncio.sleep(self.delay)

        not_found = 0
        while True:
            obj, state = await self.refresh()
            progress.attempts += 1

            if obj is None:
                not_found += 1
                if not_found > self.not_found_checks:
                    raise NotFoundWhileWaiting(checks=self.not_found_checks)
            else:
                not_found = 0
                progress.last_state = state
                if state in self.target:
                    logger.debug(
                        'state_wait_done',
                        state=state,
                        attempts=progress.attempts,
                    )
                    return obj
                if state not in self.pending:
                    raise UnexpectedState(state=state, expected=self.target)

            logger.debug(
                'state_wait_poll',
                state=state,
                attempt=progress.attempts,
                retry_in=self.poll_interval,
            )
            await asyncio.sleep(self.poll_interval)


def _labels(states: Collection[str]) -> str:
    return ', '.join(repr(s) for s in states)
