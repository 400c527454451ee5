"""
Observability module - Logging and Metrics.
"""

from play_iap.observability.logging import get_logger, log_context, setup_logging
from play_iap.observability.metrics import metrics

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
]
