"""AttemptResult model - the tagged outcome of a single attempt"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from waitfor.domain.errors import AttemptTimeoutFailure, NoResultFailure


class OutcomeKind(str, Enum):
    """What happened during an attempt"""

    ACCEPTED = "accepted"
    NO_RESULT = "no_result"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one invocation of the operation"""

    kind: OutcomeKind
    attempt: int
    value: Any = None  # Returned value (accepted / no_result)
    error: Optional[BaseException] = None  # Raised error (failed)
    timeout: Optional[float] = None  # Deadline that expired (timed_out)
    worker: Optional[threading.Thread] = None  # Abandoned worker (timed_out)

    @classmethod
    def accepted(cls, attempt: int, value: Any) -> "AttemptResult":
        return cls(OutcomeKind.ACCEPTED, attempt, value=value)

    @classmethod
    def no_result(cls, attempt: int, value: Any = None) -> "AttemptResult":
        return cls(OutcomeKind.NO_RESULT, attempt, value=value)

    @classmethod
    def timed_out(
        cls, attempt: int, timeout: float, worker: Optional[threading.Thread] = None
    ) -> "AttemptResult":
        return cls(OutcomeKind.TIMED_OUT, attempt, timeout=timeout, worker=worker)

    @classmethod
    def failed(cls, attempt: int, error: BaseException) -> "AttemptResult":
        return cls(OutcomeKind.FAILED, attempt, error=error)

    @property
    def is_accepted(self) -> bool:
        """Check if the attempt produced an accepted result"""
        return self.kind == OutcomeKind.ACCEPTED

    @property
    def failure(self) -> BaseException:
        """Exception representing a non-accepted outcome.

        Built-in failures are synthesized here; for ``failed`` outcomes the
        operation's own error is returned untouched.
        """
        if self.kind == OutcomeKind.NO_RESULT:
            return NoResultFailure(self.attempt, self.value)
        if self.kind == OutcomeKind.TIMED_OUT:
            return AttemptTimeoutFailure(self.attempt, self.timeout, self.worker)
        if self.kind == OutcomeKind.FAILED:
            return self.error
        raise ValueError(f"Attempt {self.attempt} was accepted and has no failure")

    def describe(self) -> str:
        """One-line summary used in diagnostics"""
        failure = self.failure
        return f"{type(failure).__name__}: {failure}"
