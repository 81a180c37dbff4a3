"""Retry configuration model."""

import builtins
import importlib
from typing import Any, Optional, Tuple, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, field_validator

# Delay multiplier applied after every failed attempt
DELAY_GROWTH = 2


def resolve_exception_class(name: str) -> Type[BaseException]:
    """Resolve a builtin name or dotted path to an exception class.

    Args:
        name: e.g. "ConnectionError" or "requests.exceptions.RequestException"

    Returns:
        The exception class

    Raises:
        ValueError: If the name can't be imported or isn't an exception class
    """
    try:
        if "." in name:
            module_name, _, attr = name.rpartition(".")
            obj = getattr(importlib.import_module(module_name), attr)
        else:
            obj = getattr(builtins, name)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Unknown exception class: {name}") from e
    if not (isinstance(obj, type) and issubclass(obj, BaseException)):
        raise ValueError(f"{name} is not an exception class")
    return obj


class RetryConfig(BaseModel):
    """Configuration for the retry executor.

    Attributes:
        max_attempts: Number of times to attempt the operation (alias: attempts)
        timeout: Seconds each attempt may run; None or 0 disables the deadline
        initial_delay: Delay after the first failed attempt (alias: delay)
        retry_on: Extra exception classes to retry (alias: rescue)
        retry_all: Retry every Exception raised by the operation
        verbose: Emit a diagnostic line per rescued failure and delay
        debug: Attach tracebacks to the diagnostics
    """

    max_attempts: StrictInt = Field(5, gt=0, validation_alias=AliasChoices("max_attempts", "attempts"))
    timeout: Optional[float] = Field(15.0, ge=0.0, allow_inf_nan=False)
    initial_delay: float = Field(
        1.0, ge=0.0, allow_inf_nan=False, validation_alias=AliasChoices("initial_delay", "delay")
    )
    retry_on: Tuple[Type[Exception], ...] = Field(
        default=(), validation_alias=AliasChoices("retry_on", "rescue")
    )
    retry_all: bool = False
    verbose: bool = True
    debug: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("retry_on", mode="before")
    @classmethod
    def _resolve_retry_on(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, (str, type)):
            value = [value]
        return tuple(resolve_exception_class(v) if isinstance(v, str) else v for v in value)

    @property
    def has_deadline(self) -> bool:
        """Check if attempts run under a deadline"""
        return bool(self.timeout)
