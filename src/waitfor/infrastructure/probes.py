"""Ready-made operations for common wait conditions.

Each probe is a callable taking the attempt number, so it can be handed
straight to RetryExecutor.run(). A probe returns something truthy when the
condition holds and something falsy when it doesn't hold yet; unexpected
failures are raised for the executor to classify.
"""

from __future__ import annotations

import logging
import shlex
import socket
import subprocess
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

import requests

logger = logging.getLogger(__name__)


class PortProbe:
    """Checks that a TCP port accepts connections"""

    def __init__(self, host: str, port: int, connect_timeout: float = 1.0):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

    def __call__(self, attempt: int) -> bool:
        try:
            with socket.create_connection((self.host, self.port), timeout=self.connect_timeout):
                return True
        except OSError as e:
            logger.debug(f"Attempt {attempt}: {self.host}:{self.port} not reachable: {e}")
            return False

    def __repr__(self) -> str:
        return f"port {self.host}:{self.port}"


@dataclass(frozen=True)
class HttpResult:
    """An accepted HTTP answer.

    Always truthy, unlike ``requests.Response`` which is falsy for 4xx/5xx
    statuses even when they were listed as accepted.
    """

    response: requests.Response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    def __bool__(self) -> bool:
        return True


class HttpProbe:
    """Checks that an HTTP endpoint answers with an accepted status.

    Any 2xx status is accepted, plus whatever is listed in ``expected_status``.
    Transport errors (refused connection, DNS, read timeout) are raised as
    ``requests.RequestException``; list that class as retryable to keep
    polling through them.

    A session passed in stays owned by the caller. Otherwise the probe opens
    its own, released by close() or by leaving a ``with`` block.
    """

    RETRYABLE = (requests.RequestException,)

    def __init__(
        self,
        url: str,
        method: str = "GET",
        request_timeout: float = 5.0,
        expected_status: Optional[Iterable[int]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.method = method.upper()
        self.request_timeout = request_timeout
        self.expected_status = set(expected_status or ())
        self._owns_session = session is None
        self.session = session or requests.Session()

    def is_accepted(self, status_code: int) -> bool:
        return 200 <= status_code < 300 or status_code in self.expected_status

    def __call__(self, attempt: int) -> Optional[HttpResult]:
        logger.debug(f"HTTP {self.method} {self.url} (attempt {attempt})")
        resp = self.session.request(self.method, self.url, timeout=self.request_timeout)
        if self.is_accepted(resp.status_code):
            return HttpResult(resp)
        logger.debug(f"Attempt {attempt}: {self.url} answered {resp.status_code}")
        return None

    def close(self) -> None:
        """Close the session if this probe opened it"""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "HttpProbe":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.method} {self.url}"


class CommandProbe:
    """Checks that a command exits with status 0"""

    def __init__(self, argv: Sequence[str], shell: bool = False):
        if not argv:
            raise ValueError("Command must not be empty")
        self.argv: List[str] = list(argv)
        self.shell = shell

    def __call__(self, attempt: int) -> Optional[subprocess.CompletedProcess]:
        command = self.argv
        if self.shell:
            # A single argument is already a shell command line
            command = self.argv[0] if len(self.argv) == 1 else shlex.join(self.argv)
        proc = subprocess.run(command, shell=self.shell, capture_output=True, text=True)
        if proc.returncode == 0:
            return proc
        logger.debug(f"Attempt {attempt}: {self!r} exited with {proc.returncode}")
        return None

    def __repr__(self) -> str:
        return shlex.join(self.argv)
