"""URL records rendered into sitemaps.

Every record is an immutable value: all fields are given to the constructor
as keyword arguments, checked once, and frozen. Sequences are stored as
tuples and mappings as tuples of pairs, so a record can be shared freely
after it is built.

- WebSitemapUrl: plain sitemap URL (loc, lastmod, changefreq, priority)
- GoogleNewsSitemapUrl: URL with Google News publication metadata
- GoogleVideoSitemapUrl: URL with Google Video metadata
- GoogleLinkSitemapUrl: URL with localized/alternate xhtml:link entries
- SitemapIndexUrl: location of a sitemap file listed in a sitemap index
"""

import dataclasses
import re
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple, Union

from sitemap_errors import ValidationError
from url_normalizer import is_absolute_url

Timestamp = Union[datetime, date]

# Extended language codes accepted by Google News besides ISO 639 codes
EXTENDED_LANGUAGE_CODES = frozenset({'zh-cn', 'zh-tw'})
_ISO_639_CODE = re.compile(r'[a-z]{2,3}')

MAX_VIDEO_DURATION = 8 * 60 * 60
MAX_VIDEO_RATING = 5.0


class ChangeFreq(Enum):
    """How frequently the page is likely to change."""
    ALWAYS = 'always'
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    NEVER = 'never'

    def __str__(self) -> str:
        return self.value


def _set(record: object, name: str, value: object) -> None:
    # Normalize a field of a frozen dataclass during __post_init__
    object.__setattr__(record, name, value)


def _check_url(value: Optional[str], field: str) -> None:
    if value is not None and not is_absolute_url(value):
        raise ValidationError(f"{field} is not a valid absolute URL: {value!r}")


def _check_range(value: Optional[float], low: float, high: float, field: str) -> None:
    if value is not None and not low <= value <= high:
        raise ValidationError(f"{field} must be between {low} and {high}, got {value}")


def _strings(values: Union[None, str, Iterable[str]]) -> Tuple[str, ...]:
    """Freeze an iterable of strings into a tuple, keeping order and duplicates."""
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def _unique_strings(values: Union[None, str, Iterable[str]]) -> Tuple[str, ...]:
    """Freeze an iterable of strings into a tuple, dropping duplicates."""
    return tuple(dict.fromkeys(_strings(values)))


@dataclasses.dataclass(frozen=True)
class WebSitemapUrl:
    """A URL in a plain web sitemap.

    Attributes:
        url: Absolute location of the page.
        last_modified: When the page was last modified.
        change_freq: How often the page is likely to change.
        priority: Priority relative to other pages of the site, 0.0 to 1.0.
    """

    url: str
    last_modified: Optional[Timestamp] = None
    change_freq: Optional[ChangeFreq] = None
    priority: Optional[float] = None

    def __post_init__(self) -> None:
        _check_url(self.url, 'url')
        if self.change_freq is not None and not isinstance(self.change_freq, ChangeFreq):
            try:
                _set(self, 'change_freq', ChangeFreq(str(self.change_freq).lower()))
            except ValueError as e:
                raise ValidationError(f"Unknown change frequency: {self.change_freq!r}") from e
        if self.priority is not None:
            _set(self, 'priority', float(self.priority))
            _check_range(self.priority, 0.0, 1.0, 'priority')


@dataclasses.dataclass(frozen=True, kw_only=True)
class GoogleNewsSitemapUrl(WebSitemapUrl):
    """A URL in a Google News sitemap.

    Unlike ``last_modified``, ``publication_date`` is always required.
    ``publication_language`` is an ISO 639 code (e.g. ``en``) or one of
    ``zh-cn`` and ``zh-tw``.
    """

    publication_date: Timestamp
    title: str
    publication_name: str
    publication_language: str
    accessible_for_free: Optional[bool] = None
    genres: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.publication_date is None:
            raise ValidationError("publication_date is required for news URLs")
        for field in ('title', 'publication_name', 'publication_language'):
            if not getattr(self, field):
                raise ValidationError(f"{field} is required for news URLs")
        language = self.publication_language.lower()
        if not (_ISO_639_CODE.fullmatch(language) or language in EXTENDED_LANGUAGE_CODES):
            raise ValidationError(
                f"Language must be an ISO 639 code or one of "
                f"{sorted(EXTENDED_LANGUAGE_CODES)}, got {self.publication_language!r}"
            )
        _set(self, 'genres', _unique_strings(self.genres))
        _set(self, 'keywords', _strings(self.keywords))


@dataclasses.dataclass(frozen=True, kw_only=True)
class GoogleVideoSitemapUrl(WebSitemapUrl):
    """A URL in a Google Video sitemap.

    At least one of ``content_url`` and ``player_url`` must be given.
    ``allow_embed`` is only rendered together with ``player_url``.
    """

    content_url: Optional[str] = None
    player_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None
    view_count: Optional[int] = None
    publication_date: Optional[Timestamp] = None
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None
    family_friendly: Optional[bool] = None
    duration: Optional[int] = None
    allow_embed: Optional[bool] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.content_url is None and self.player_url is None:
            raise ValidationError("Video URLs need a content_url or a player_url")
        _check_url(self.content_url, 'content_url')
        _check_url(self.player_url, 'player_url')
        _check_url(self.thumbnail_url, 'thumbnail_url')
        if self.rating is not None:
            _set(self, 'rating', float(self.rating))
            _check_range(self.rating, 0.0, MAX_VIDEO_RATING, 'rating')
        if self.view_count is not None and self.view_count < 0:
            raise ValidationError(f"view_count must not be negative, got {self.view_count}")
        _check_range(self.duration, 0, MAX_VIDEO_DURATION, 'duration')
        # Google caps tags at 32
        _set(self, 'tags', _strings(self.tags))


@dataclasses.dataclass(frozen=True, kw_only=True)
class GoogleLinkSitemapUrl(WebSitemapUrl):
    """A URL with alternate versions, rendered as ``xhtml:link`` elements.

    ``alternates`` maps each alternate URL to its link attributes
    (``hreflang`` and/or ``media``). Insertion order is kept.
    """

    alternates: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        alternates = self.alternates
        if isinstance(alternates, Mapping):
            alternates = alternates.items()
        frozen = {}
        for href, attributes in alternates:
            _check_url(href, 'alternate')
            if isinstance(attributes, Mapping):
                attributes = attributes.items()
            frozen[href] = tuple(attributes)
        _set(self, 'alternates', tuple(frozen.items()))


@dataclasses.dataclass(frozen=True)
class SitemapIndexUrl:
    """A sitemap file listed in a sitemap index.

    Attributes:
        url: Absolute location of the sitemap file.
        last_modified: When the sitemap file was last modified.
    """

    url: str
    last_modified: Optional[Timestamp] = None

    def __post_init__(self) -> None:
        _check_url(self.url, 'url')
