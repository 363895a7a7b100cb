"""Internal logging utilities."""

import logging

# Create SDK logger
logger = logging.getLogger("routertel")

# Default to WARNING to avoid noise
logger.setLevel(logging.WARNING)


def log_internal_error(operation: str, error: Exception) -> None:
    """Log an internal SDK error without raising to user code."""
    logger.warning(f"routertel internal error in {operation}: {error}", exc_info=True)
