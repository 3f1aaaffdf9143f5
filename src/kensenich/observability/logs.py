"""
KensenichManager - Logging.

Usage:
    from kensenich.observability import setup_logging
    setup_logging("DEBUG")   # DEBUG also shows every SQL statement

Request logging is an HTTP middleware registered by the web app:
    app.middleware("http")(log_requests)
"""

import logging
import sys
import time
from typing import Awaitable, Callable

from fastapi import Request, Response

logger = logging.getLogger("kensenich.requests")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Libraries that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log method, path, status and duration for every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms"
    )
    return response
