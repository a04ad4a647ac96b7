"""
Middleware package exports.
"""

from middleware.request_id import RequestIDMiddleware, install_log_record_factory
from middleware.rate_limiter import limiter, get_user_id

__all__ = ["RequestIDMiddleware", "install_log_record_factory", "limiter", "get_user_id"]
