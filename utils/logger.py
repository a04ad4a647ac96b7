"""
Logging helpers shared by the services and middleware.
"""

import logging
from typing import Any, Dict


SENSITIVE_FIELDS = {
    'password', 'hashed_password', 'token', 'secret', 'authorization',
    'access_token', 'refresh_token', 'cookie',
}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact credential material from a dict before it is attached to a log record.

    Any key containing one of SENSITIVE_FIELDS (case-insensitive) has its string
    value replaced. Nested dicts are sanitized recursively. Token values are
    fully redacted as well: a prefix of a JWT is its header, which identifies
    nothing useful.

    Args:
        data: Dictionary that may contain sensitive fields

    Returns:
        A sanitized copy; the input is not modified
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized
