"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from waitfor.domain.config.probes import ProbeConfig
from waitfor.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model for `.waitfor.yml`. Validation happens at load time so that a
    bad attempt budget fails before anything is polled.

    Attributes:
        retry: Retry executor configuration
        probes: Built-in probe configuration
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)
    probes: ProbeConfig = Field(default_factory=ProbeConfig)

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "retry": {
                    "attempts": 5,
                    "timeout": 15.0,
                    "delay": 1.0,
                    "retry_on": ["ConnectionError"],
                    "retry_all": False,
                    "verbose": True,
                    "debug": False,
                },
                "probes": {
                    "connect_timeout": 1.0,
                    "request_timeout": 5.0,
                    "http_method": "GET",
                    "expected_status": [],
                },
            }
        },
    )
