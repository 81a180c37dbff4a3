"""Probe configuration model."""

from typing import List, Literal

from pydantic import BaseModel, Field


class ProbeConfig(BaseModel):
    """Configuration for the built-in probes.

    Attributes:
        connect_timeout: Socket timeout for port probes, in seconds
        request_timeout: Timeout for a single HTTP request, in seconds
        http_method: HTTP method used by the HTTP probe
        expected_status: Extra HTTP status codes accepted besides 2xx
    """

    connect_timeout: float = Field(1.0, gt=0.0)
    request_timeout: float = Field(5.0, gt=0.0)
    http_method: Literal["GET", "HEAD", "POST"] = "GET"
    expected_status: List[int] = Field(default_factory=list)
