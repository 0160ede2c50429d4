"""
Validators Package

Validation helpers shared by the import pipeline.
"""

from .url import (
    DEFAULT_ALLOWED_SCHEMES,
    MAX_URL_LENGTH,
    is_valid_bookmark_url,
    validate_url_format,
)

__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "MAX_URL_LENGTH",
    "is_valid_bookmark_url",
    "validate_url_format",
]
