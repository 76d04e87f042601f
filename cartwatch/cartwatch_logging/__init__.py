"""
Structured logging for cartwatch.

JSON logs with timestamp, user_id, event_type, tick.
Use get_logger() in all agent modules for aggregation-friendly output.
"""

from cartwatch.cartwatch_logging.logger import configure_logging, configure_structlog, get_logger

__all__ = ["configure_logging", "configure_structlog", "get_logger"]
