"""
Logging helpers for the Task Tracker API
"""
import logging
import sys
from typing import Optional

logger = logging.getLogger("src")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging with a single stderr handler.

    Call once at startup; repeated calls replace the handler instead of stacking.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Third-party noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_error(error: Exception, context: str, user_id: Optional[str] = None) -> None:
    """
    Log an unexpected error with its traceback.

    Args:
        error: The exception that was caught
        context: Where it happened, e.g. "TaskService.create_task"
        user_id: The requesting user, if known
    """
    logger.error(
        "%s failed (user_id=%s): %s: %s",
        context,
        user_id,
        type(error).__name__,
        error,
        exc_info=error,
    )


__all__ = ["setup_logging", "log_error"]
