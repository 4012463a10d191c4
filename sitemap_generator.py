"""Module for generating XML sitemaps from URL records.

This module provides the generators that collect URL records and write them
as sitemap documents:
- WebSitemapGenerator: plain sitemaps (loc, lastmod, changefreq, priority)
- GoogleNewsSitemapGenerator: sitemaps with Google News metadata
- GoogleVideoSitemapGenerator: sitemaps with Google Video metadata
- GoogleLinkSitemapGenerator: sitemaps with alternate xhtml:link entries

URLs are collected with ``add_url``/``add_urls`` and written once with
``write()``. When there are more URLs than ``max_urls`` the output is split
into ``sitemap1.xml``, ``sitemap2.xml``, ... in the order the URLs were
added; a single file is named ``sitemap.xml``.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from sitemap_errors import CapacityError, ConfigError, StateError
from sitemap_renderers import (
    GoogleLinkSitemapUrlRenderer,
    GoogleNewsSitemapUrlRenderer,
    GoogleVideoSitemapUrlRenderer,
    WebSitemapUrlRenderer,
    render_document,
)
from sitemap_sinks import StringSink, make_file_sink
from sitemap_urls import WebSitemapUrl
from sitemap_validator import validate_web_sitemap
from url_normalizer import check_url, is_absolute_url
from w3c_date import W3CDateFormat

# Configuration Constants
MAX_URLS_PER_SITEMAP: int = 50000
DEFAULT_MAX_URLS: int = MAX_URLS_PER_SITEMAP
DEFAULT_FILE_NAME_PREFIX: str = 'sitemap'
DEFAULT_INDEX_FILE_NAME_PREFIX: str = 'sitemap_index'
XML_EXTENSION: str = '.xml'

logger = logging.getLogger(__name__)


class SitemapGenerator:
    """Collects URL records and writes them as one or more sitemap documents.

    A generator accepts URLs until ``write()`` is called once; after that it
    is finished and refuses further URLs and writes. Subclasses pick the
    renderer (and so the record type) they work with.

    Attributes:
        base_url: All URLs must be on the same host as this URL.
        base_dir: Directory receiving the sitemap files, or None when only
            string output is needed.
        max_urls: Maximum number of URLs per sitemap file.
        allow_multiple_sitemaps: Whether output may be split over several files.
        allow_empty_sitemap: Whether writing without URLs is allowed.
        gzip: Whether files are written gzip-compressed (``.xml.gz``).
        auto_validate: Whether each written file is schema-validated.
        date_format: Formatter for every date of the sitemap.
        file_name_prefix: Base name of the files, ``sitemap`` by default.
        suffix_string_pattern: Text inserted between the prefix and the
            file number (or replacing the number for a single file).
        urls: Records added so far, in add order.
        finished: True once ``write()`` has been called.
    """

    renderer = WebSitemapUrlRenderer()
    default_date_format: W3CDateFormat = W3CDateFormat.AUTO
    default_file_name_prefix: str = DEFAULT_FILE_NAME_PREFIX

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
    ) -> None:
        """Configure the generator.

        Args:
            base_url: All URLs in the generated sitemap(s) must be on this host.
            base_dir: Sitemap files are written to this directory (default: None).
            max_urls: URLs per sitemap file, 1 to 50000 (default: 50000).
            allow_multiple_sitemaps: Split into several files (default: True).
            allow_empty_sitemap: Allow writing without URLs (default: False).
            gzip: Write gzip-compressed files (default: False).
            auto_validate: Validate each file after writing (default: False).
            date_format: Date formatter (default: AUTO in UTC).
            file_name_prefix: Base file name (default: "sitemap").
            suffix_string_pattern: Fixed file name suffix (default: "").

        Raises:
            ConfigError: If the base URL is not absolute or max_urls is out of range.
        """
        if not is_absolute_url(base_url):
            raise ConfigError(f"Base URL must be an absolute URL, got {base_url!r}")
        if not 0 < max_urls <= MAX_URLS_PER_SITEMAP:
            raise ConfigError(
                f"max_urls must be between 1 and {MAX_URLS_PER_SITEMAP}, got {max_urls}"
            )
        self.base_url = base_url
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.max_urls = max_urls
        self.allow_multiple_sitemaps = allow_multiple_sitemaps
        self.allow_empty_sitemap = allow_empty_sitemap
        self.gzip = gzip
        self.auto_validate = auto_validate
        self.date_format = date_format or self.default_date_format
        self.file_name_prefix = file_name_prefix or self.default_file_name_prefix
        self.suffix_string_pattern = suffix_string_pattern or ''
        self.urls: List[Any] = []
        self.finished = False

    def _url_from_string(self, url: str) -> Any:
        raise TypeError(
            f"{type(self).__name__} needs {self.renderer.url_class.__name__} "
            f"records, not plain strings"
        )

    def _validate(self, handle: Any) -> None:
        validate_web_sitemap(handle)

    def add_url(self, url: Any) -> 'SitemapGenerator':
        """Add one URL record (or URL string where supported).

        Args:
            url: Record of this generator's type, or a plain URL string.

        Returns:
            The generator itself, for chaining.

        Raises:
            StateError: If the sitemap was already written.
            ValidationError: If the URL is not on the base URL's host.
            CapacityError: If splitting is disabled and the ceiling is reached.
        """
        if self.finished:
            raise StateError("Sitemap already printed; you must create a new generator to make more sitemaps")
        if isinstance(url, str):
            url = self._url_from_string(url)
        if not isinstance(url, self.renderer.url_class):
            raise TypeError(
                f"Expected {self.renderer.url_class.__name__}, got {type(url).__name__}"
            )
        check_url(url.url, self.base_url)
        if not self.allow_multiple_sitemaps and len(self.urls) >= self.max_urls:
            raise CapacityError(
                f"More than {self.max_urls} urls, but allow_multiple_sitemaps is false. "
                f"Enable allow_multiple_sitemaps to split the sitemap into multiple files."
            )
        self.urls.append(url)
        logger.debug(f"Added {url.url} ({len(self.urls)} URLs)")
        return self

    def add_urls(self, *urls: Any) -> 'SitemapGenerator':
        """Add several URL records (or URL strings where supported).

        Records are passed as separate arguments, ``add_urls(a, b)``, or as a
        single list or other iterable, ``add_urls([a, b])``.
        """
        if len(urls) == 1 and not isinstance(urls[0], str) and isinstance(urls[0], Iterable):
            urls = tuple(urls[0])
        for url in urls:
            self.add_url(url)
        return self

    def _runs(self) -> List[List[Any]]:
        """Split the URLs into runs of at most ``max_urls``, in add order."""
        if not self.urls:
            if not self.allow_empty_sitemap:
                raise StateError("No URLs added, sitemap would be empty; you must add some URLs with add_urls")
            return [[]]
        return [
            self.urls[start:start + self.max_urls]
            for start in range(0, len(self.urls), self.max_urls)
        ]

    def _file_names(self, count: int) -> List[str]:
        base = self.file_name_prefix + self.suffix_string_pattern
        if count == 1:
            return [base + XML_EXTENSION]
        return [f'{base}{number}{XML_EXTENSION}' for number in range(1, count + 1)]

    def _render(self, run: List[Any]) -> str:
        return render_document(self.renderer, run, self.date_format)

    def write(self) -> List[Path]:
        """Write the sitemap file(s); can be called only once.

        Returns:
            Paths of the written files, in order.

        Raises:
            StateError: If already written, or no URLs were added and empty
                sitemaps are not allowed.
            ConfigError: If no base directory is configured.
            ValidationError: If auto-validation is on and a file is invalid.
        """
        if self.finished:
            raise StateError("Sitemap already printed; you must create a new generator to make more sitemaps")
        runs = self._runs()
        if self.base_dir is None:
            raise ConfigError("To write to files, base_dir must not be None")
        self.finished = True

        sink = make_file_sink(self.base_dir, self.gzip)
        logger.debug(f"Writing {len(self.urls)} URLs in {len(runs)} sitemap(s) to {self.base_dir}")
        files = []
        for name, run in zip(self._file_names(len(runs)), runs):
            path = sink.write(self._render(run).encode('utf-8'), name)
            if self.auto_validate:
                self._validate(path)
            files.append(path)
        return files

    def write_as_strings(self) -> List[str]:
        """Render the sitemap(s) in memory without touching storage.

        Returns:
            One XML document per sitemap file that ``write()`` would produce.
        """
        sink = StringSink()
        runs = self._runs()
        for name, run in zip(self._file_names(len(runs)), runs):
            sink.write(self._render(run).encode('utf-8'), name)
        return sink.documents

    def write_as_string(self) -> str:
        """Render the sitemap in memory; only valid when it fits in one file.

        Raises:
            StateError: If the URLs need more than one sitemap.
        """
        documents = self.write_as_strings()
        if len(documents) > 1:
            raise StateError(
                f"{len(self.urls)} URLs need {len(documents)} sitemaps; use write_as_strings()"
            )
        return documents[0]


class UrlSitemapGenerator(SitemapGenerator):
    """Base of the ``urlset`` generators; can also index its own files."""

    def _sitemap_file_names(self) -> List[str]:
        suffix = make_file_sink(self.base_dir, self.gzip).suffix
        return [name + suffix for name in self._file_names(len(self._runs()))]

    def _index_generator(self, file_name_prefix: str, last_modified: Optional[datetime]):
        from sitemap_index import SitemapIndexGenerator

        generator = SitemapIndexGenerator(
            self.base_url,
            self.base_dir,
            date_format=self.date_format,
            auto_validate=self.auto_validate,
            file_name_prefix=file_name_prefix,
            default_last_modified=last_modified or datetime.now(timezone.utc),
        )
        generator.add_urls(*self._sitemap_file_names())
        return generator

    def write_sitemaps_with_index(
        self,
        file_name_prefix: str = DEFAULT_INDEX_FILE_NAME_PREFIX,
        last_modified: Optional[datetime] = None,
    ) -> List[Path]:
        """Write a sitemap index listing the files produced by ``write()``.

        Args:
            file_name_prefix: Base name of the index file (default: "sitemap_index").
            last_modified: lastmod of every entry (default: now).

        Returns:
            Paths of the written index file(s).

        Raises:
            StateError: If ``write()`` was not called yet.
        """
        if not self.finished:
            raise StateError("Sitemaps not generated yet; call write() first")
        return self._index_generator(file_name_prefix, last_modified).write()

    def write_sitemaps_with_index_as_string(self, last_modified: Optional[datetime] = None) -> str:
        """Render the sitemap index for this generator's files in memory."""
        return self._index_generator(DEFAULT_INDEX_FILE_NAME_PREFIX, last_modified).write_as_string()


class WebSitemapGenerator(UrlSitemapGenerator):
    """Builds plain sitemaps; accepts WebSitemapUrl records or URL strings."""

    def _url_from_string(self, url: str) -> WebSitemapUrl:
        return WebSitemapUrl(url)


class GoogleNewsSitemapGenerator(UrlSitemapGenerator):
    """Builds Google News sitemaps.

    Publication dates default to SECOND precision; pass
    ``date_format=W3CDateFormat.AUTO`` to pick the precision per date.
    """

    renderer = GoogleNewsSitemapUrlRenderer()
    default_date_format = W3CDateFormat.SECOND


class GoogleVideoSitemapGenerator(UrlSitemapGenerator):
    """Builds Google Video sitemaps."""

    renderer = GoogleVideoSitemapUrlRenderer()


class GoogleLinkSitemapGenerator(UrlSitemapGenerator):
    """Builds sitemaps with localized/alternate links (hreflang, media)."""

    renderer = GoogleLinkSitemapUrlRenderer()
