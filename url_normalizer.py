"""Module for URL checks shared by the sitemap generators.

This module provides the base-URL pre-check applied to every URL added to a
generator:
- Absolute URL check (scheme and host present)
- Host normalization (lowercase, port and credentials dropped)
- Same-host check against the generator's base URL (scheme is ignored)
- Resolving sitemap file names against the base URL
"""

from urllib.parse import urljoin, urlparse
from typing import Optional

from sitemap_errors import ValidationError


def normalize_host(url: str) -> Optional[str]:
    """Return the lowercase host of a URL.

    Args:
        url: URL to inspect.

    Returns:
        The host name without port or credentials, or None if there is none.
    """
    if not url:
        return None
    return urlparse(url).hostname


def is_absolute_url(url: str) -> bool:
    """Check whether a URL carries both a scheme and a host.

    Args:
        url: URL to check.

    Returns:
        True if the URL is absolute, False otherwise.
    """
    if not isinstance(url, str) or not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.hostname)


def check_url(url: str, base_url: str) -> str:
    """Check that a URL belongs to the same host as the base URL.

    The scheme is not compared, so http and https URLs of the same host are
    both accepted.

    Args:
        url: Candidate URL.
        base_url: Base URL of the generator.

    Returns:
        The URL unchanged.

    Raises:
        ValidationError: If the URL is malformed or its host differs.
    """
    if not is_absolute_url(url):
        raise ValidationError(f"Malformed URL: {url!r}")
    if normalize_host(url) != normalize_host(base_url):
        raise ValidationError(
            f"Domain of URL {url} doesn't match base URL {base_url}"
        )
    return url


def resolve_url(base_url: str, name: str) -> str:
    """Resolve a file name or relative path against the base URL.

    Args:
        base_url: Base URL of the generator.
        name: Relative name, e.g. ``sitemap1.xml``.

    Returns:
        Absolute URL.
    """
    return urljoin(base_url, name)
