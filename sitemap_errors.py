"""Exceptions raised by the sitemap generators.

All errors are raised synchronously and are never retried:
- ConfigError: missing or invalid generator configuration
- ValidationError: URL outside the base domain, bad record field or schema failure
- CapacityError: too many URLs for a generator that cannot split its output
- StateError: the generator was used out of order (double write, empty write)
- FormatError: a timestamp string could not be parsed
"""


class SitemapError(Exception):
    """Base class for all sitemap generation errors."""


class ConfigError(SitemapError):
    """Raised when a generator is configured incorrectly."""


class ValidationError(SitemapError, ValueError):
    """Raised when a URL or a written document is not valid."""


class CapacityError(SitemapError):
    """Raised when a URL would exceed the ceiling of a single-file generator."""


class StateError(SitemapError):
    """Raised when an operation is not allowed in the generator's current state."""


class FormatError(SitemapError, ValueError):
    """Raised when a W3C date/time string cannot be parsed."""
