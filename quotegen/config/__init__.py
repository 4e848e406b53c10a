"""QuoteGen configuration.

This package contains:
- settings: Environment variables and configuration
- vocabulary: Stop words, synonyms and matching term tables
- errors: Custom exceptions and error codes
- log_config: structlog setup
"""

from quotegen.config.settings import Settings
from quotegen.config.errors import QuoteGenError, ErrorCode

__all__ = [
    "Settings",
    "QuoteGenError",
    "ErrorCode",
]
