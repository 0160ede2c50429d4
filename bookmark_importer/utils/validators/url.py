"""
URL Validators

Syntactic and scheme validation for bookmark URLs found in export files.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urlparse

DEFAULT_ALLOWED_SCHEMES = ("http", "https", "ftp")

# Maximum URL length accepted for a bookmark
MAX_URL_LENGTH = 2048

_HOST_PATTERN = re.compile(
    r"^(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|"  # domain...
    r"localhost|"  # localhost...
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})$",  # ...or ip
    re.IGNORECASE,
)


def validate_url_format(
    url: Optional[str], allowed_schemes: Optional[Iterable[str]] = None
) -> bool:
    """
    Validate URL format.

    Args:
        url: URL string to validate
        allowed_schemes: Schemes to accept (defaults to http, https and ftp)

    Returns:
        True if valid, False if invalid

    Note:
        Rejects javascript:, mailto:, relative and malformed URLs.
    """
    # Handle None, empty, or whitespace-only strings
    if not url or not isinstance(url, str) or not url.strip():
        return False

    url = url.strip()

    if len(url) > MAX_URL_LENGTH or any(ch.isspace() for ch in url):
        return False

    # Reject malformed URLs
    if url.count("://") != 1:
        return False

    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return False

    schemes = {s.lower() for s in (allowed_schemes or DEFAULT_ALLOWED_SCHEMES)}
    if parsed.scheme.lower() not in schemes:
        return False

    hostname = parsed.hostname
    if not hostname or not _HOST_PATTERN.match(hostname):
        return False

    if port is not None and not 0 < port < 65536:
        return False

    return True


def is_valid_bookmark_url(url: Optional[str]) -> bool:
    """Only web URLs are accepted as bookmarks."""
    return validate_url_format(url, allowed_schemes=("http", "https"))
