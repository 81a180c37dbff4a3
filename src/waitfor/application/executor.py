"""Bounded-retry executor.

Runs an operation until it returns a truthy value, the attempt budget runs out,
or it raises something that isn't retryable. Each attempt is bounded by a
deadline and failed attempts are followed by an exponentially growing delay.

    >>> wait_for(lambda attempt: attempt == 3, attempts=3, delay=0.01)
    True
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError
from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_exponential
from tenacity.nap import sleep as tenacity_sleep

from waitfor.domain.config.retry import DELAY_GROWTH, RetryConfig
from waitfor.domain.errors import BUILTIN_FAILURES, ConfigurationError
from waitfor.domain.models.outcome import AttemptResult, OutcomeKind
from waitfor.infrastructure.deadline import call_with_deadline

logger = logging.getLogger(__name__)

Operation = Callable[[int], Any]
DiagnosticSink = Union[logging.Logger, logging.LoggerAdapter]


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        field = ".".join(str(x) for x in item["loc"]) or "config"
        lines.append(f"  - {field}: {item['msg']}")
    return "Invalid retry configuration:\n" + "\n".join(lines)


class RetryExecutor:
    """Runs an operation with bounded retries, per-attempt deadline and backoff.

    Options (or a ready ``RetryConfig``) are validated once, at construction.
    Nothing is kept between calls to :meth:`run`.
    """

    def __init__(
        self,
        config: Optional[Union[RetryConfig, Mapping[str, Any]]] = None,
        *,
        logger: Optional[DiagnosticSink] = None,
        sleep: Optional[Callable[[float], None]] = None,
        **options: Any,
    ):
        """Initialize executor

        Args:
            config: RetryConfig, or a mapping validated into one (mutually exclusive with options)
            logger: Diagnostic sink for rescued failures and delays
            sleep: Blocking sleep used between attempts (defaults to tenacity's)
            **options: RetryConfig fields or aliases (attempts, timeout, delay, ...)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if config is not None and options:
            raise ConfigurationError("Pass either a RetryConfig or keyword options, not both")
        if not isinstance(config, RetryConfig):
            try:
                config = RetryConfig(**options) if config is None else RetryConfig.model_validate(config)
            except ValidationError as e:
                raise ConfigurationError(_format_validation_error(e)) from e

        self.config = config
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.sleep = sleep or tenacity_sleep

    def is_retryable(self, outcome: AttemptResult) -> bool:
        """Classify a non-accepted outcome.

        Args:
            outcome: Outcome of the attempt

        Returns:
            True if another attempt may follow this one
        """
        if outcome.kind in (OutcomeKind.NO_RESULT, OutcomeKind.TIMED_OUT):
            return True
        if outcome.kind != OutcomeKind.FAILED:
            return False

        error = outcome.error
        if not isinstance(error, Exception):
            return False
        if isinstance(error, BUILTIN_FAILURES):
            return True
        if self.config.retry_all:
            return True
        return isinstance(error, self.config.retry_on)

    def attempt(self, operation: Operation, attempt: int) -> AttemptResult:
        """Invoke the operation once under the per-attempt deadline"""
        logger.debug(f"Attempt {attempt}/{self.config.max_attempts}")
        timeout = self.config.timeout if self.config.has_deadline else None
        record = call_with_deadline(operation, attempt, timeout=timeout)
        if not record.finished:
            return AttemptResult.timed_out(attempt, self.config.timeout, record.worker)
        if record.raised:
            return AttemptResult.failed(attempt, record.error)
        if record.value:
            return AttemptResult.accepted(attempt, record.value)
        return AttemptResult.no_result(attempt, record.value)

    def _log_rescue(self, retry_state: RetryCallState) -> None:
        if not self.config.verbose or retry_state.outcome is None:
            return
        outcome: AttemptResult = retry_state.outcome.result()
        exc_info = outcome.error if self.config.debug and outcome.error is not None else None
        self.logger.warning(f"Rescued exception while waiting: {outcome.describe()}", exc_info=exc_info)

        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        self.logger.warning(
            f"Attempt {retry_state.attempt_number}/{self.config.max_attempts} failed, delaying for {delay}s"
        )

    def _controller(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=self.config.initial_delay, exp_base=DELAY_GROWTH, min=0),
            retry=retry_if_result(lambda outcome: not outcome.is_accepted and self.is_retryable(outcome)),
            before_sleep=self._log_rescue,
            sleep=self.sleep,
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )

    def run(self, operation: Operation) -> Any:
        """Run the operation until it returns a truthy value

        Args:
            operation: Callable receiving the 1-based attempt number

        Returns:
            The first truthy value returned by the operation

        Raises:
            NoResultFailure: If the last attempt returned a falsy value
            AttemptTimeoutFailure: If the last attempt exceeded the deadline
            Exception: Whatever the operation raised, when not retryable or on
                the last attempt
        """
        outcome: Optional[AttemptResult] = None
        for attempt in self._controller():
            with attempt:
                outcome = self.attempt(operation, attempt.retry_state.attempt_number)
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(outcome)

        if outcome.is_accepted:
            return outcome.value
        raise outcome.failure

    __call__ = run


def wait_for(operation: Operation, **options: Any) -> Any:
    """Run ``operation`` with a one-off executor built from ``options``."""
    return RetryExecutor(**options).run(operation)
