"""Fixed-interval polling with timeout and cancellation."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from assetgraph.exceptions import AssetGraphError
from assetgraph.log import logger

logger = logger.getChild(__name__)

DEFAULT_INTERVAL = 5.0


class WaitTimeoutError(AssetGraphError):
    """The condition did not become true before the timeout."""


class WaitCancelledError(AssetGraphError):
    """The wait was cancelled before the condition became true."""


def wait_for(
    check: Callable[[], object],
    interval: float = DEFAULT_INTERVAL,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
    description: str = "condition",
) -> object:
    """Call ``check`` every ``interval`` seconds until it returns truthy.

    Exceptions from ``check`` count as "not yet".

    Args:
        check: Zero-argument probe
        interval: Seconds between attempts
        timeout: Give up after this many seconds (None waits forever)
        cancel: Event that aborts the wait when set
        description: Used in log and error messages

    Returns:
        The first truthy value returned by ``check``

    Raises:
        WaitTimeoutError: If ``timeout`` elapses first
        WaitCancelledError: If ``cancel`` is set first
    """
    cancel = cancel or threading.Event()
    deadline = None if timeout is None else time.monotonic() + timeout
    attempt = 0

    while True:
        if cancel.is_set():
            raise WaitCancelledError(f"cancelled waiting for {description}")
        attempt += 1
        try:
            result = check()
        except Exception as e:
            logger.debug("Waiting for %s (attempt %d): %s", description, attempt, e)
        else:
            if result:
                return result
            logger.debug("Waiting for %s (attempt %d)", description, attempt)

        delay = interval
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise WaitTimeoutError(f"timed out after {timeout}s waiting for {description}")
            delay = min(delay, remaining)
        if cancel.wait(delay):
            raise WaitCancelledError(f"cancelled waiting for {description}")
