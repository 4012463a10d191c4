"""Renderers turning URL records into sitemap XML.

Each renderer knows one record type and produces the indented ``<url>``
(or ``<sitemap>``) element for a single record, plus the namespace
declarations its elements need. Renderers hold no state and can be shared.

Optional fields are never rendered as empty tags: a tag is omitted when its
value is unset.
"""

from typing import Iterable, Optional
from xml.sax.saxutils import escape

from sitemap_urls import (
    GoogleLinkSitemapUrl,
    GoogleNewsSitemapUrl,
    GoogleVideoSitemapUrl,
    SitemapIndexUrl,
    WebSitemapUrl,
)
from w3c_date import W3CDateFormat

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

SITEMAP_NS_URI = 'http://www.sitemaps.org/schemas/sitemap/0.9'
GOOGLE_NEWS_NS = 'news'
GOOGLE_NEWS_NS_URI = 'http://www.google.com/schemas/sitemap-news/0.9'
GOOGLE_VIDEO_NS = 'video'
GOOGLE_VIDEO_NS_URI = 'http://www.google.com/schemas/sitemap-video/1.1'
GOOGLE_LINK_NS = 'xhtml'
GOOGLE_LINK_NS_URI = 'http://www.w3.org/1999/xhtml'

INDENT = '  '

# Link attributes rendered on xhtml:link, in output order
LINK_ATTRIBUTES = ('hreflang', 'media')


def escape_text(value: str) -> str:
    """Escape a value placed in element content."""
    return escape(value)


def escape_attribute(value: str) -> str:
    """Escape a value placed inside a double-quoted attribute."""
    return escape(value, {'"': '&quot;'})


def _text(value: object) -> str:
    if isinstance(value, bool):
        return 'yes' if value else 'no'
    if isinstance(value, float):
        return f'{value:.1f}'
    return escape_text(str(value))


def render_tag(namespace: Optional[str], tag: str, value: object, depth: int) -> str:
    """Render ``<ns:tag>value</ns:tag>`` on its own line.

    Args:
        namespace: Namespace prefix, or None for the sitemap namespace.
        tag: Local tag name.
        value: Tag content; booleans render as yes/no and floats with one decimal.
        depth: Nesting level used for indentation.

    Returns:
        The rendered line, or an empty string when ``value`` is None.
    """
    if value is None:
        return ''
    name = f'{namespace}:{tag}' if namespace else tag
    return f'{INDENT * depth}<{name}>{_text(value)}</{name}>\n'


def render_url_element(
    url: WebSitemapUrl,
    date_format: W3CDateFormat,
    additional: str = '',
) -> str:
    """Render the ``<url>`` element with the base tags and extension block.

    Args:
        url: Record to render.
        date_format: Formatter for ``lastmod``.
        additional: Already rendered extension elements, placed last.

    Returns:
        The rendered ``<url>`` element.
    """
    parts = [f'{INDENT}<url>\n', render_tag(None, 'loc', url.url, 2)]
    if url.last_modified is not None:
        parts.append(render_tag(None, 'lastmod', date_format.format(url.last_modified), 2))
    if url.change_freq is not None:
        parts.append(render_tag(None, 'changefreq', url.change_freq.value, 2))
    parts.append(render_tag(None, 'priority', url.priority, 2))
    parts.append(additional)
    parts.append(f'{INDENT}</url>\n')
    return ''.join(parts)


class WebSitemapUrlRenderer:
    """Renders plain sitemap URLs; also the base of the extension renderers."""

    url_class = WebSitemapUrl
    root_tag = 'urlset'

    def namespace_declarations(self) -> str:
        return ''

    def open_root(self) -> str:
        namespaces = self.namespace_declarations()
        if namespaces:
            namespaces += ' '
        return f'<{self.root_tag} xmlns="{SITEMAP_NS_URI}" {namespaces}>\n'

    def render(self, url: WebSitemapUrl, date_format: W3CDateFormat) -> str:
        return render_url_element(url, date_format)


class GoogleNewsSitemapUrlRenderer(WebSitemapUrlRenderer):
    """Renders the ``news:news`` block of Google News URLs."""

    url_class = GoogleNewsSitemapUrl

    def namespace_declarations(self) -> str:
        return f'xmlns:{GOOGLE_NEWS_NS}="{GOOGLE_NEWS_NS_URI}"'

    def render(self, url: GoogleNewsSitemapUrl, date_format: W3CDateFormat) -> str:
        ns = GOOGLE_NEWS_NS
        parts = [
            f'{INDENT * 2}<{ns}:news>\n',
            f'{INDENT * 3}<{ns}:publication>\n',
            render_tag(ns, 'name', url.publication_name, 4),
            render_tag(ns, 'language', url.publication_language, 4),
            f'{INDENT * 3}</{ns}:publication>\n',
        ]
        if url.accessible_for_free is False:
            parts.append(render_tag(ns, 'access', 'Subscription', 3))
        if url.genres:
            parts.append(render_tag(ns, 'genres', ', '.join(url.genres), 3))
        parts.append(render_tag(ns, 'publication_date', date_format.format(url.publication_date), 3))
        parts.append(render_tag(ns, 'title', url.title, 3))
        if url.keywords:
            parts.append(render_tag(ns, 'keywords', ', '.join(url.keywords), 3))
        parts.append(f'{INDENT * 2}</{ns}:news>\n')
        return render_url_element(url, date_format, ''.join(parts))


class GoogleVideoSitemapUrlRenderer(WebSitemapUrlRenderer):
    """Renders the ``video:video`` block of Google Video URLs."""

    url_class = GoogleVideoSitemapUrl

    def namespace_declarations(self) -> str:
        return f'xmlns:{GOOGLE_VIDEO_NS}="{GOOGLE_VIDEO_NS_URI}"'

    def render(self, url: GoogleVideoSitemapUrl, date_format: W3CDateFormat) -> str:
        ns = GOOGLE_VIDEO_NS
        parts = [
            f'{INDENT * 2}<{ns}:video>\n',
            render_tag(ns, 'content_loc', url.content_url, 3),
        ]
        if url.player_url is not None:
            embed = ''
            if url.allow_embed is not None:
                embed = f' allow_embed="{_text(url.allow_embed)}"'
            parts.append(
                f'{INDENT * 3}<{ns}:player_loc{embed}>'
                f'{escape_text(url.player_url)}</{ns}:player_loc>\n'
            )
        parts.append(render_tag(ns, 'thumbnail_loc', url.thumbnail_url, 3))
        parts.append(render_tag(ns, 'title', url.title, 3))
        parts.append(render_tag(ns, 'description', url.description, 3))
        parts.append(render_tag(ns, 'rating', url.rating, 3))
        parts.append(render_tag(ns, 'view_count', url.view_count, 3))
        if url.publication_date is not None:
            parts.append(render_tag(ns, 'publication_date', date_format.format(url.publication_date), 3))
        for tag in url.tags:
            parts.append(render_tag(ns, 'tag', tag, 3))
        parts.append(render_tag(ns, 'category', url.category, 3))
        parts.append(render_tag(ns, 'family_friendly', url.family_friendly, 3))
        parts.append(render_tag(ns, 'duration', url.duration, 3))
        parts.append(f'{INDENT * 2}</{ns}:video>\n')
        return render_url_element(url, date_format, ''.join(parts))


class GoogleLinkSitemapUrlRenderer(WebSitemapUrlRenderer):
    """Renders one self-closing ``xhtml:link`` element per alternate URL."""

    url_class = GoogleLinkSitemapUrl

    def namespace_declarations(self) -> str:
        return f'xmlns:{GOOGLE_LINK_NS}="{GOOGLE_LINK_NS_URI}"'

    def render(self, url: GoogleLinkSitemapUrl, date_format: W3CDateFormat) -> str:
        parts = []
        for href, attributes in url.alternates:
            attributes = dict(attributes)
            parts.append(f'{INDENT * 2}<{GOOGLE_LINK_NS}:link\n')
            parts.append(f'{INDENT * 3}rel="alternate"\n')
            for name in LINK_ATTRIBUTES:
                if name in attributes:
                    parts.append(f'{INDENT * 3}{name}="{escape_attribute(attributes[name])}"\n')
            parts.append(f'{INDENT * 3}href="{escape_attribute(href)}"\n')
            parts.append(f'{INDENT * 2}/>\n')
        return render_url_element(url, date_format, ''.join(parts))


class SitemapIndexUrlRenderer(WebSitemapUrlRenderer):
    """Renders ``<sitemap>`` entries of a sitemap index."""

    url_class = SitemapIndexUrl
    root_tag = 'sitemapindex'

    def open_root(self) -> str:
        return f'<{self.root_tag} xmlns="{SITEMAP_NS_URI}">\n'

    def render(self, url: SitemapIndexUrl, date_format: W3CDateFormat) -> str:
        parts = [f'{INDENT}<sitemap>\n', render_tag(None, 'loc', url.url, 2)]
        if url.last_modified is not None:
            parts.append(render_tag(None, 'lastmod', date_format.format(url.last_modified), 2))
        parts.append(f'{INDENT}</sitemap>\n')
        return ''.join(parts)


def render_document(
    renderer: WebSitemapUrlRenderer,
    urls: Iterable[WebSitemapUrl],
    date_format: W3CDateFormat,
) -> str:
    """Render a complete sitemap document for one run of URLs.

    Args:
        renderer: Renderer matching the URL records.
        urls: Records of the run, in output order. May be empty.
        date_format: Formatter shared by all date fields.

    Returns:
        The XML document, without a trailing newline.
    """
    parts = [XML_DECLARATION, renderer.open_root()]
    parts.extend(renderer.render(url, date_format) for url in urls)
    parts.append(f'</{renderer.root_tag}>')
    return ''.join(parts)
