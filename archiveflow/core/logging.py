"""Logging utilities for archiveflow modules."""

import logging


ROOT_LOGGER_NAME = 'archiveflow'


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.

    This ensures that loggers work with basicConfig() without needing
    explicit setup_logging() calls. The logger will:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers

    Args:
        name: Logger name (typically 'archiveflow.<area>')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    # Only set default level if root logger has no handlers
    # (i.e., basicConfig hasn't been called yet)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


def mask_secret(value: str, visible: int = 4) -> str:
    """
    Mask a credential for log output.

    Args:
        value: Secret string
        visible: Number of leading characters kept readable

    Returns:
        Masked string, e.g. 'AbCd********'
    """
    if not value:
        return ''
    if len(value) <= visible:
        return '*' * len(value)
    return value[:visible] + '*' * (len(value) - visible)
