"""Example: block until a local service is up before using it.

    python examples/wait_for_service.py localhost 8080
"""

import logging
import sys

import requests

from waitfor import RetryExecutor
from waitfor.infrastructure.probes import HttpProbe, PortProbe

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")


def main(host: str, port: int) -> None:
    executor = RetryExecutor(attempts=6, timeout=5, delay=0.5, retry_on=[requests.RequestException])

    executor.run(PortProbe(host, port))
    with HttpProbe(f"http://{host}:{port}/health", expected_status=[404]) as probe:
        result = executor.run(probe)
    print(f"{host}:{port} is serving ({result.status_code})")


if __name__ == "__main__":
    main(sys.argv[1], int(sys.argv[2]))
