"""
Bounded poller for external asynchronous jobs.

Turns "start a job, poll until done" into a finite operation with two
distinguishable failure modes: JobFailed (the service reported failure) and
JobTimedOut (still pending after max_attempts polls).

The blocking wait() suspends only the calling worker. await_result() is the
cooperative twin for asyncio callers and counts attempts identically.

Dependencies: asyncio, time
System role: Reusable wait primitive used by the OCR task
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from backend.core.exceptions import JobFailed, JobTimedOut

logger = logging.getLogger(__name__)


class PollStatus(str, Enum):
    """Normalized status of an external job."""

    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class PollResult(BaseModel):
    """One poll() observation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: PollStatus
    payload: Any = None
    message: str | None = None


class BoundedPoller:
    """Poll an external job at a fixed interval with an attempt ceiling."""

    def __init__(
        self,
        poll_interval: float,
        max_attempts: int,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "external job",
    ) -> None:
        """
        Initialize poller.

        Args:
            poll_interval: Seconds to wait between polls
            max_attempts: Maximum number of poll() calls
            sleep: Blocking sleep function (injectable for tests)
            async_sleep: Coroutine sleep used by await_result()
            name: Label used in logs and error messages

        Raises:
            ValueError: Negative interval or attempt count below 1
        """
        if poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._async_sleep = async_sleep
        self._name = name

    @property
    def max_wait_seconds(self) -> float:
        return self._poll_interval * self._max_attempts

    def wait(self, poll: Callable[[], PollResult]) -> Any:
        """
        Poll until the job succeeds, fails, or runs out of attempts.

        Args:
            poll: Callable returning the job's current PollResult

        Returns:
            Any: Payload of the SUCCEEDED observation

        Raises:
            JobFailed: poll() reported FAILED
            JobTimedOut: Still PENDING after max_attempts calls
        """
        for attempt in range(1, self._max_attempts + 1):
            result = poll()
            if self._is_done(result, attempt):
                return result.payload
            self._sleep(self._poll_interval)

        # Unreachable: _is_done raises on the last attempt
        raise JobTimedOut(f"{self._name} timed out", attempts=self._max_attempts)

    async def await_result(self, poll: Callable[[], Awaitable[PollResult]]) -> Any:
        """Async version of wait(); yields to the event loop between polls."""
        for attempt in range(1, self._max_attempts + 1):
            result = await poll()
            if self._is_done(result, attempt):
                return result.payload
            await self._async_sleep(self._poll_interval)

        raise JobTimedOut(f"{self._name} timed out", attempts=self._max_attempts)

    def _is_done(self, result: PollResult, attempt: int) -> bool:
        if result.status is PollStatus.SUCCEEDED:
            logger.info(
                "BoundedPoller - %s succeeded",
                self._name,
                extra={"attempts": attempt},
            )
            return True

        if result.status is PollStatus.FAILED:
            logger.warning(
                "BoundedPoller - %s failed: %s",
                self._name,
                result.message,
                extra={"attempts": attempt},
            )
            raise JobFailed(
                f"{self._name} failed" + (f": {result.message}" if result.message else ""),
                attempts=attempt,
            )

        if attempt >= self._max_attempts:
            logger.warning(
                "BoundedPoller - %s still pending after %d attempts",
                self._name,
                attempt,
            )
            raise JobTimedOut(
                f"{self._name} timed out after {attempt} attempts",
                attempts=attempt,
                details={"max_wait_seconds": self.max_wait_seconds},
            )

        logger.debug("BoundedPoller - %s pending (attempt %d)", self._name, attempt)
        return False
