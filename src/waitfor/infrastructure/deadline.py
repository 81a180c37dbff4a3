"""Per-attempt deadline enforcement.

Python offers no safe way to preempt a running function, so a bounded attempt
runs on its own daemon thread and the caller joins it with a timeout. When the
deadline passes first the thread is abandoned, not killed: whatever the
operation was doing carries on in the background until it returns on its own.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CallRecord:
    """What a bounded call produced by the time the caller stopped waiting"""

    finished: bool = False
    value: Any = None
    error: Optional[BaseException] = None
    worker: Optional[threading.Thread] = None

    @property
    def raised(self) -> bool:
        return self.finished and self.error is not None


def call_inline(func: Callable[..., Any], *args: Any) -> CallRecord:
    """Call ``func`` on the current thread with no deadline."""
    try:
        return CallRecord(finished=True, value=func(*args))
    except Exception as e:
        return CallRecord(finished=True, error=e)


def call_with_deadline(func: Callable[..., Any], *args: Any, timeout: Optional[float]) -> CallRecord:
    """Call ``func`` and wait at most ``timeout`` seconds for it to finish.

    Args:
        func: Callable to run
        *args: Positional arguments for ``func``
        timeout: Deadline in seconds; None or 0 runs inline without one

    Returns:
        CallRecord. ``finished`` is False when the deadline expired, in which
        case ``worker`` is the still-running daemon thread.
    """
    if not timeout:
        return call_inline(func, *args)

    record = CallRecord()

    def _target() -> None:
        try:
            record.value = func(*args)
        except BaseException as e:  # ferried back to the caller's thread
            record.error = e

    worker = threading.Thread(target=_target, name=f"waitfor-{getattr(func, '__name__', 'call')}", daemon=True)
    record.worker = worker
    worker.start()
    worker.join(timeout=timeout)

    if worker.is_alive():
        logger.debug(f"Deadline of {timeout}s expired, abandoning {worker.name}")
        return record

    record.finished = True
    return record
