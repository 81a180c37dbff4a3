"""Failure taxonomy for waitfor.

Errors raised by the operation itself are never wrapped: they propagate to
the caller as-is. The classes here are the failures the executor raises on its
own behalf.
"""

from __future__ import annotations

import threading
from typing import Any, Optional


class WaitError(Exception):
    """Base class for errors raised by waitfor itself."""

    pass


class ConfigurationError(WaitError):
    """Invalid executor or file configuration."""

    pass


class NoResultFailure(WaitError):
    """The operation completed but returned a falsy value.

    Attributes:
        attempt: Attempt number that produced the value
        value: The falsy value itself
    """

    def __init__(self, attempt: int, value: Any = None):
        self.attempt = attempt
        self.value = value
        super().__init__(f"result was {value!r}")


class AttemptTimeoutFailure(WaitError):
    """The operation did not complete within the per-attempt deadline.

    Deliberately not a subclass of the builtin ``TimeoutError`` so that an
    expired deadline can't be mistaken for an application timeout.

    Attributes:
        attempt: Attempt number that timed out
        timeout: Deadline in seconds
        worker: Thread still running the abandoned attempt (daemon)
    """

    def __init__(self, attempt: int, timeout: float, worker: Optional[threading.Thread] = None):
        self.attempt = attempt
        self.timeout = timeout
        self.worker = worker
        super().__init__(f"attempt {attempt} timed out after {timeout}s")


BUILTIN_FAILURES = (NoResultFailure, AttemptTimeoutFailure)
