import gzip
import math
from datetime import datetime
from pathlib import Path

import pytest

from sitemap_errors import CapacityError, ConfigError, StateError, ValidationError
from sitemap_generator import GoogleNewsSitemapGenerator, WebSitemapGenerator
from sitemap_urls import ChangeFreq, WebSitemapUrl
from w3c_date import W3CDateFormat


BASE = "https://www.example.com"
HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" >\n'
)


def urlset(*locs: str) -> str:
    urls = ''.join(f"  <url>\n    <loc>{loc}</loc>\n  </url>\n" for loc in locs)
    return HEADER + urls + "</urlset>"


SITEMAP_PLUS_ONE = urlset(f"{BASE}/just-one-more")
SITEMAP1 = urlset(*(f"{BASE}/{i}" for i in range(10)))
SITEMAP2 = urlset(*(f"{BASE}/{i}" for i in range(10, 20)))


def add_numbered(wsg: WebSitemapGenerator, count: int, start: int = 0) -> None:
    for i in range(start, start + count):
        wsg.add_url(f"{BASE}/{i}")


def write_single_sitemap(wsg: WebSitemapGenerator) -> str:
    files = wsg.write()
    assert len(files) == 1, f"Too many files: {files}"
    assert files[0].name == "sitemap.xml"
    return files[0].read_text(encoding="utf-8")


def test_simple_url(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_url(f"{BASE}/index.html")
    expected = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" >\n'
        '  <url>\n'
        '    <loc>https://www.example.com/index.html</loc>\n'
        '  </url>\n'
        '</urlset>'
    )
    assert write_single_sitemap(wsg) == expected


def test_two_urls(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_urls(f"{BASE}/index.html", f"{BASE}/index2.html")
    assert write_single_sitemap(wsg) == urlset(f"{BASE}/index.html", f"{BASE}/index2.html")


@pytest.mark.parametrize("urls", [
    [f"{BASE}/index.html", f"{BASE}/index2.html"],
    (f"{BASE}/index.html", f"{BASE}/index2.html"),
    iter([f"{BASE}/index.html", f"{BASE}/index2.html"]),
])
def test_add_urls_from_iterable(urls):
    wsg = WebSitemapGenerator(BASE)
    wsg.add_urls(urls)
    assert wsg.write_as_string() == urlset(f"{BASE}/index.html", f"{BASE}/index2.html")


def test_add_urls_single_string():
    wsg = WebSitemapGenerator(BASE)
    wsg.add_urls(f"{BASE}/index.html")
    assert [url.url for url in wsg.urls] == [f"{BASE}/index.html"]


def test_all_url_options(tmp_path: Path, epoch: datetime):
    wsg = WebSitemapGenerator(BASE, tmp_path, date_format=W3CDateFormat.AUTO, auto_validate=True)
    wsg.add_url(WebSitemapUrl(
        f"{BASE}/index.html",
        last_modified=epoch,
        change_freq=ChangeFreq.DAILY,
        priority=1.0,
    ))
    expected = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" >\n'
        '  <url>\n'
        '    <loc>https://www.example.com/index.html</loc>\n'
        '    <lastmod>1970-01-01</lastmod>\n'
        '    <changefreq>daily</changefreq>\n'
        '    <priority>1.0</priority>\n'
        '  </url>\n'
        '</urlset>'
    )
    assert write_single_sitemap(wsg) == expected


def test_loc_is_escaped():
    wsg = WebSitemapGenerator(BASE)
    wsg.add_url(f"{BASE}/search?a=1&b=2")
    assert "<loc>https://www.example.com/search?a=1&amp;b=2</loc>" in wsg.write_as_string()


def test_bad_url(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    with pytest.raises(ValidationError):
        wsg.add_url("https://example.com/index.html")
    assert wsg.urls == []


def test_same_domain_different_scheme_ok(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_url("http://www.example.com/index.html")
    assert write_single_sitemap(wsg) == urlset("http://www.example.com/index.html")


def test_host_comparison_ignores_case():
    wsg = WebSitemapGenerator(BASE)
    wsg.add_url("https://WWW.Example.com/index.html")
    assert len(wsg.urls) == 1


def test_double_write(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_url(f"{BASE}/index.html")
    write_single_sitemap(wsg)
    with pytest.raises(StateError):
        wsg.write()


def test_add_after_write(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_url(f"{BASE}/index.html")
    wsg.write()
    with pytest.raises(StateError):
        wsg.add_url(f"{BASE}/index2.html")


def test_empty_write(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    with pytest.raises(StateError):
        wsg.write()
    assert list(tmp_path.iterdir()) == []


def test_suffix_present(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, suffix_string_pattern="01")
    wsg.add_urls(f"{BASE}/url1", f"{BASE}/url2")
    files = wsg.write()
    assert files[0].name == "sitemap01.xml"


def test_empty_suffix(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, suffix_string_pattern="")
    wsg.add_urls(f"{BASE}/url1", f"{BASE}/url2")
    files = wsg.write()
    assert files[0].name == "sitemap.xml"


def test_file_name_prefix(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, file_name_prefix="foo", max_urls=2)
    add_numbered(wsg, 3)
    assert [f.name for f in wsg.write()] == ["foo1.xml", "foo2.xml"]


def test_too_many_urls(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, allow_multiple_sitemaps=False, max_urls=10)
    add_numbered(wsg, 10)
    with pytest.raises(CapacityError):
        wsg.add_url(f"{BASE}/just-one-more")
    assert write_single_sitemap(wsg) == SITEMAP1


def test_max_urls_plus_one(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, auto_validate=True, max_urls=10)
    add_numbered(wsg, 10)
    wsg.add_url(f"{BASE}/just-one-more")
    files = wsg.write()
    assert [f.name for f in files] == ["sitemap1.xml", "sitemap2.xml"]
    assert files[0].read_text(encoding="utf-8") == SITEMAP1
    assert files[1].read_text(encoding="utf-8") == SITEMAP_PLUS_ONE


def test_max_urls(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, auto_validate=True, max_urls=10)
    add_numbered(wsg, 10)
    assert write_single_sitemap(wsg) == SITEMAP1


def test_max_urls_times_two(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, auto_validate=True, max_urls=10)
    add_numbered(wsg, 20)
    files = wsg.write()
    assert [f.name for f in files] == ["sitemap1.xml", "sitemap2.xml"]
    assert files[0].read_text(encoding="utf-8") == SITEMAP1
    assert files[1].read_text(encoding="utf-8") == SITEMAP2


def test_max_urls_times_two_plus_one(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, auto_validate=True, max_urls=10)
    add_numbered(wsg, 20)
    wsg.add_url(f"{BASE}/just-one-more")
    files = wsg.write()
    assert [f.name for f in files] == ["sitemap1.xml", "sitemap2.xml", "sitemap3.xml"]
    assert [f.read_text(encoding="utf-8") for f in files] == [SITEMAP1, SITEMAP2, SITEMAP_PLUS_ONE]


@pytest.mark.parametrize("count, max_urls", [(1, 1), (5, 2), (6, 3), (7, 10), (31, 10)])
def test_runs_are_filled_in_add_order(count: int, max_urls: int):
    wsg = WebSitemapGenerator(BASE, max_urls=max_urls)
    add_numbered(wsg, count)
    documents = wsg.write_as_strings()
    assert len(documents) == math.ceil(count / max_urls)
    for number, document in enumerate(documents):
        first = number * max_urls
        last = min(first + max_urls, count)
        assert document == urlset(*(f"{BASE}/{i}" for i in range(first, last)))


def test_gzip(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path / "gz", gzip=True, auto_validate=True)
    add_numbered(wsg, 10)
    files = wsg.write()
    assert [f.name for f in files] == ["sitemap.xml.gz"]
    with gzip.open(files[0], "rb") as f:
        compressed = f.read()

    plain = WebSitemapGenerator(BASE, tmp_path / "plain")
    add_numbered(plain, 10)
    assert compressed == plain.write()[0].read_bytes()
    assert compressed.decode("utf-8") == SITEMAP1


def test_base_dir_is_none():
    wsg = WebSitemapGenerator(BASE, None, auto_validate=True, max_urls=10)
    wsg.add_url(f"{BASE}/index.html")
    with pytest.raises(ConfigError) as e:
        wsg.write()
    assert str(e.value) == "To write to files, base_dir must not be None"
    assert wsg.finished is False


def test_write_as_strings_more_than_one_string():
    wsg = WebSitemapGenerator(BASE, None, auto_validate=True, max_urls=10)
    add_numbered(wsg, 10)
    wsg.add_url(f"{BASE}/just-one-more")
    assert wsg.write_as_strings() == [SITEMAP1, SITEMAP_PLUS_ONE]
    with pytest.raises(StateError):
        wsg.write_as_string()


def test_write_as_strings_does_not_finish(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path)
    wsg.add_url(f"{BASE}/index.html")
    assert wsg.write_as_string() == urlset(f"{BASE}/index.html")
    assert list(tmp_path.iterdir()) == []
    assert write_single_sitemap(wsg) == wsg.write_as_string()


def test_write_empty_sitemap(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, allow_empty_sitemap=True)
    expected = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" >\n'
        '</urlset>'
    )
    assert write_single_sitemap(wsg) == expected


def test_max_urls_allowing_empty_does_not_write_extra_sitemap(tmp_path: Path):
    wsg = WebSitemapGenerator(BASE, tmp_path, allow_empty_sitemap=True, max_urls=10)
    add_numbered(wsg, 10)
    assert write_single_sitemap(wsg) == SITEMAP1


def test_auto_validate_failure_is_raised(tmp_path: Path):
    # <loc> shorter than the 12 characters the schema requires
    wsg = WebSitemapGenerator("http://a.b", tmp_path, auto_validate=True)
    wsg.add_url("http://a.b/")
    with pytest.raises(ValidationError):
        wsg.write()


@pytest.mark.parametrize("base_url", ["www.example.com", "/relative", ""])
def test_base_url_must_be_absolute(base_url: str):
    with pytest.raises(ConfigError):
        WebSitemapGenerator(base_url)


@pytest.mark.parametrize("max_urls", [0, -1, 50001])
def test_max_urls_out_of_range(max_urls: int):
    with pytest.raises(ConfigError):
        WebSitemapGenerator(BASE, max_urls=max_urls)


def test_extension_generators_need_records():
    with pytest.raises(TypeError):
        GoogleNewsSitemapGenerator(BASE).add_url(f"{BASE}/index.html")


def test_write_sitemaps_with_index(tmp_path: Path, epoch: datetime):
    wsg = WebSitemapGenerator(BASE, tmp_path, max_urls=10, auto_validate=True)
    add_numbered(wsg, 20)
    with pytest.raises(StateError):
        wsg.write_sitemaps_with_index()
    wsg.write()
    files = wsg.write_sitemaps_with_index(last_modified=epoch)
    assert files == [tmp_path / "sitemap_index.xml"]
    expected = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        '  <sitemap>\n'
        '    <loc>https://www.example.com/sitemap1.xml</loc>\n'
        '    <lastmod>1970-01-01</lastmod>\n'
        '  </sitemap>\n'
        '  <sitemap>\n'
        '    <loc>https://www.example.com/sitemap2.xml</loc>\n'
        '    <lastmod>1970-01-01</lastmod>\n'
        '  </sitemap>\n'
        '</sitemapindex>'
    )
    assert files[0].read_text(encoding="utf-8") == expected


def test_sitemaps_index_lists_gzip_files(epoch: datetime):
    wsg = WebSitemapGenerator(BASE, gzip=True)
    wsg.add_url(f"{BASE}/index.html")
    index = wsg.write_sitemaps_with_index_as_string(last_modified=epoch)
    assert "<loc>https://www.example.com/sitemap.xml.gz</loc>" in index
