"""Module for generating sitemap index files.

A sitemap index lists the locations of sitemap files. It is written with
the same splitting, naming and validation rules as the sitemaps themselves,
but its records are SitemapIndexUrl entries rendered as ``<sitemap>``
elements of a ``<sitemapindex>`` document.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Optional, Union

from sitemap_generator import DEFAULT_INDEX_FILE_NAME_PREFIX, DEFAULT_MAX_URLS, SitemapGenerator
from sitemap_renderers import SitemapIndexUrlRenderer
from sitemap_urls import SitemapIndexUrl, Timestamp
from sitemap_validator import validate_sitemap_index
from url_normalizer import resolve_url
from w3c_date import W3CDateFormat

logger = logging.getLogger(__name__)


class SitemapIndexGenerator(SitemapGenerator):
    """Builds a sitemap index (``sitemap_index.xml`` by default).

    Attributes:
        default_last_modified: lastmod given to every entry added without one.
    """

    renderer = SitemapIndexUrlRenderer()
    default_file_name_prefix = DEFAULT_INDEX_FILE_NAME_PREFIX

    def __init__(
        self,
        base_url: str,
        base_dir: Optional[Union[str, Path]] = None,
        *,
        max_urls: int = DEFAULT_MAX_URLS,
        allow_multiple_sitemaps: bool = True,
        allow_empty_sitemap: bool = False,
        gzip: bool = False,
        auto_validate: bool = False,
        date_format: Optional[W3CDateFormat] = None,
        file_name_prefix: Optional[str] = None,
        suffix_string_pattern: str = '',
        default_last_modified: Optional[Timestamp] = None,
    ) -> None:
        super().__init__(
            base_url,
            base_dir,
            max_urls=max_urls,
            allow_multiple_sitemaps=allow_multiple_sitemaps,
            allow_empty_sitemap=allow_empty_sitemap,
            gzip=gzip,
            auto_validate=auto_validate,
            date_format=date_format,
            file_name_prefix=file_name_prefix,
            suffix_string_pattern=suffix_string_pattern,
        )
        self.default_last_modified = default_last_modified

    def _url_from_string(self, url: str) -> SitemapIndexUrl:
        # Relative names such as "sitemap1.xml" are resolved against the base URL
        return SitemapIndexUrl(resolve_url(self.base_url, url))

    def _validate(self, handle) -> None:
        validate_sitemap_index(handle)

    def add_url(self, url) -> 'SitemapIndexGenerator':
        """Add a sitemap location; entries without lastmod get the default."""
        if isinstance(url, str):
            url = self._url_from_string(url)
        if (
            isinstance(url, SitemapIndexUrl)
            and url.last_modified is None
            and self.default_last_modified is not None
        ):
            url = dataclasses.replace(url, last_modified=self.default_last_modified)
        super().add_url(url)
        return self

    def add_numbered_urls(self, prefix: str, suffix: str, count: int) -> 'SitemapIndexGenerator':
        """Add ``count`` sitemaps named ``prefix`` + number + ``suffix``.

        Numbers start at 1 and names are resolved against the base URL, so
        ``add_numbered_urls("sitemap", ".xml", 2)`` adds ``<base>/sitemap1.xml``
        and ``<base>/sitemap2.xml``.

        Args:
            prefix: Text before the number.
            suffix: Text after the number, e.g. ".xml".
            count: Number of sitemaps to add.

        Returns:
            The generator itself, for chaining.
        """
        logger.debug(f"Adding {count} sitemaps named {prefix}N{suffix}")
        for number in range(1, count + 1):
            self.add_url(f'{prefix}{number}{suffix}')
        return self
