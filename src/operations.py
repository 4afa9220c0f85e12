"""
Waiting on Compute Engine long-running operations.
"""

import logging
import time
from typing import Callable, Optional

from errors import OperationError, OperationTimeoutError
from models import Operation

logger = logging.getLogger(__name__)


class OperationWaiter:
    """Polls an operation at a fixed interval until it is DONE."""

    def __init__(
        self,
        api,
        poll_interval: float = 1.0,
        max_wait: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the waiter.

        Args:
            api: ComputeRestClient used to re-fetch operations
            poll_interval: Seconds to sleep between polls
            max_wait: Give up after this many seconds (None waits forever)
            max_attempts: Give up after this many polls (None polls forever)
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock used for max_wait
        """
        self.api = api
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.clock = clock

    def fetch(self, op: Operation) -> Operation:
        """Re-read an operation through the accessor matching its scope."""
        if op.scope == "zone":
            return self.api.get_zone_operation(op.zone, op.name)
        if op.scope == "region":
            return self.api.get_region_operation(op.region, op.name)
        return self.api.get_global_operation(op.name)

    def check_bounds(self, started: float, attempts: int, what: str) -> None:
        """Raise OperationTimeoutError once a configured bound is exceeded."""
        if self.max_attempts is not None and attempts >= self.max_attempts:
            raise OperationTimeoutError(
                f"{what}: gave up after {attempts} polls"
            )
        if self.max_wait is not None:
            elapsed = self.clock() - started
            if elapsed >= self.max_wait:
                raise OperationTimeoutError(
                    f"{what}: gave up after {elapsed:.0f}s"
                )

    def wait(self, op: Operation, phase: str) -> Operation:
        """
        Block until the operation is DONE.

        Args:
            op: Operation returned by a write call
            phase: Label used for progress logging

        Returns:
            The terminal operation

        Raises:
            OperationError: If the operation finished with errors
            OperationTimeoutError: If max_wait or max_attempts is exceeded
            ComputeApiError: If fetching the operation fails
        """
        started = self.clock()
        attempts = 0
        while not op.done:
            self.check_bounds(started, attempts, f"{phase} ({op.name})")
            self.sleep(self.poll_interval)
            op = self.fetch(op)
            attempts += 1
            logger.info(f"{phase}: {op.progress}")

        if op.failed:
            raise OperationError(op.name, phase, op.errors)
        logger.debug(f"{phase}: operation {op.name} done")
        return op
