"""Configuration models with Pydantic validation."""

from waitfor.domain.config.app import AppConfig
from waitfor.domain.config.probes import ProbeConfig
from waitfor.domain.config.retry import DELAY_GROWTH, RetryConfig

__all__ = [
    "AppConfig",
    "ProbeConfig",
    "RetryConfig",
    "DELAY_GROWTH",
]
