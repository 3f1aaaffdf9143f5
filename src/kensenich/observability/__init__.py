"""
KensenichManager - Observability.

Logging setup and per-request access logging.
"""

from kensenich.observability.logs import log_requests, setup_logging

__all__ = [
    "log_requests",
    "setup_logging",
]
