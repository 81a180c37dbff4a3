"""waitfor - run an operation until it produces a result, with bounded retries."""

from waitfor.application.executor import RetryExecutor, wait_for
from waitfor.domain.config import RetryConfig
from waitfor.domain.errors import (
    AttemptTimeoutFailure,
    ConfigurationError,
    NoResultFailure,
    WaitError,
)
from waitfor.domain.models.outcome import AttemptResult, OutcomeKind

__version__ = "0.1.0"

__all__ = [
    "RetryExecutor",
    "wait_for",
    "RetryConfig",
    "AttemptResult",
    "OutcomeKind",
    "WaitError",
    "ConfigurationError",
    "NoResultFailure",
    "AttemptTimeoutFailure",
]
