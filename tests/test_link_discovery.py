"""Tests for link discovery strategies and fallbacks."""

from types import SimpleNamespace

import httpx
import pytest

from ssr_audit.exceptions import EmptyResultError, NetworkError, ParseError, RenderError
from ssr_audit.infrastructure import FetchConfig, NoopRateLimiter, RateLimitedFetcher
from ssr_audit.link_discovery import (
    HtmlSitemapStrategy,
    LinkDiscovery,
    RenderedLinksStrategy,
    XmlSitemapStrategy,
    build_default_strategies,
    extract_root_relative_links,
    parse_xml_sitemap,
)

HOMEPAGE = "https://example.com"

XML_SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/about</loc></url>
  <url><loc>https://example.com/blog/first-post</loc></url>
  <url><loc>https://example.com/products/widget</loc></url>
  <url><loc>https://example.com/contact</loc></url>
</urlset>
"""

HTML_SITEMAP = """
<html><body>
  <a href="/">Home</a>
  <a href="/about">About</a>
  <a href="/about">About again</a>
  <a href="https://other.com/external">External</a>
  <a href="relative/path">Relative</a>
  <a href="/shop/item-1">Item</a>
</body></html>
"""


class FakeFetcher:
    """Returns canned bodies per URL; unknown URLs fail like an exhausted retry."""

    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    async def fetch(self, url):
        self.requested.append(url)
        body = self.pages.get(url)
        if body is None:
            raise NetworkError(url, 4)
        if isinstance(body, Exception):
            raise body
        return SimpleNamespace(text=body, status_code=200)


class FakeRenderer:
    """Stands in for BrowserRenderer.scrape_links."""

    def __init__(self, links=None, error=None):
        self.links = links or []
        self.error = error
        self.scraped = []

    async def scrape_links(self, url):
        self.scraped.append(url)
        if self.error:
            raise self.error
        return list(self.links)


class TestParseXmlSitemap:
    """Tests for XML sitemap parsing."""

    def test_extracts_all_locations(self):
        urls = parse_xml_sitemap(XML_SITEMAP, "https://example.com/sitemap.xml")

        assert urls == [
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/blog/first-post",
            "https://example.com/products/widget",
            "https://example.com/contact",
        ]

    def test_without_namespace(self):
        xml = "<urlset><url><loc> https://example.com/a </loc></url></urlset>"
        assert parse_xml_sitemap(xml, "x") == ["https://example.com/a"]

    def test_malformed_xml(self):
        with pytest.raises(ParseError):
            parse_xml_sitemap("<html><body>Not found", "https://example.com/sitemap.xml")

    def test_empty_urlset(self):
        xml = '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"></urlset>'
        with pytest.raises(ParseError):
            parse_xml_sitemap(xml, "https://example.com/sitemap.xml")

    def test_sitemap_index_is_not_a_urlset(self):
        xml = (
            '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            '<sitemap><loc>https://example.com/sitemap-1.xml</loc></sitemap>'
            '</sitemapindex>'
        )
        with pytest.raises(ParseError):
            parse_xml_sitemap(xml, "https://example.com/sitemap.xml")

    def test_duplicates_removed_in_order(self):
        xml = (
            "<urlset><url><loc>https://example.com/b</loc></url>"
            "<url><loc>https://example.com/a</loc></url>"
            "<url><loc>https://example.com/b</loc></url></urlset>"
        )
        assert parse_xml_sitemap(xml, "x") == ["https://example.com/b", "https://example.com/a"]


class TestExtractRootRelativeLinks:
    """Tests for HTML sitemap link extraction."""

    def test_only_root_relative_links_resolved_and_deduped(self):
        links = extract_root_relative_links(HTML_SITEMAP, HOMEPAGE)

        assert links == [
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/shop/item-1",
        ]

    def test_no_links(self):
        assert extract_root_relative_links("<html><body><p>None</p></body></html>", HOMEPAGE) == []


class TestLinkDiscovery:
    """Tests for the ordered strategy chain."""

    @pytest.mark.asyncio
    async def test_xml_sitemap_wins_without_trying_others(self):
        """A valid sitemap.xml with 5 URLs is used as-is."""
        fetcher = FakeFetcher({"https://example.com/sitemap.xml": XML_SITEMAP})
        renderer = FakeRenderer(links=["https://example.com/never"])
        discovery = LinkDiscovery(build_default_strategies(fetcher, renderer))

        result = await discovery.discover(HOMEPAGE)

        assert len(result.links) == 5
        assert result.strategy == "xml-sitemap:/sitemap.xml"
        assert fetcher.requested == ["https://example.com/sitemap.xml"]
        assert renderer.scraped == []

    @pytest.mark.asyncio
    async def test_falls_through_to_html_sitemap(self):
        """A broken sitemap.xml moves on to /sitemap."""
        fetcher = FakeFetcher({
            "https://example.com/sitemap.xml": "<html>oops",
            "https://example.com/sitemap": HTML_SITEMAP,
        })
        discovery = LinkDiscovery(build_default_strategies(fetcher, FakeRenderer()))

        result = await discovery.discover(HOMEPAGE)

        assert result.strategy == "html-sitemap:/sitemap"
        assert "https://example.com/shop/item-1" in result.links
        assert fetcher.requested == [
            "https://example.com/sitemap.xml",
            "https://example.com/sitemap",
        ]

    @pytest.mark.asyncio
    async def test_site_map_path_used_third(self):
        fetcher = FakeFetcher({"https://example.com/site-map": HTML_SITEMAP})
        discovery = LinkDiscovery(build_default_strategies(fetcher, FakeRenderer()))

        result = await discovery.discover(HOMEPAGE)

        assert result.strategy == "html-sitemap:/site-map"
        assert len(fetcher.requested) == 3

    @pytest.mark.asyncio
    async def test_rendered_fallback_after_all_sitemaps_fail(self):
        """Network errors on every sitemap fall back to the rendered homepage."""
        fetcher = FakeFetcher({})
        rendered = [
            "https://example.com/",
            "https://example.com/blog",
            "https://example.com/news/1",
            "https://example.com/about",
        ]
        renderer = FakeRenderer(links=rendered)
        discovery = LinkDiscovery(build_default_strategies(fetcher, renderer))

        result = await discovery.discover(HOMEPAGE)

        assert result.links == rendered
        assert result.strategy == RenderedLinksStrategy.name
        assert renderer.scraped == [HOMEPAGE]

    @pytest.mark.asyncio
    async def test_html_sitemap_without_links_falls_through(self):
        fetcher = FakeFetcher({
            "https://example.com/sitemap": "<html><body>Nothing here</body></html>",
            "https://example.com/site-map": HTML_SITEMAP,
        })
        discovery = LinkDiscovery(build_default_strategies(fetcher, FakeRenderer()))

        result = await discovery.discover(HOMEPAGE)

        assert result.strategy == "html-sitemap:/site-map"

    @pytest.mark.asyncio
    async def test_everything_fails_returns_empty(self):
        """Render failures are caught too; the result is simply empty."""
        renderer = FakeRenderer(error=RenderError(HOMEPAGE, TimeoutError("navigation timeout")))
        discovery = LinkDiscovery(build_default_strategies(FakeFetcher({}), renderer))

        result = await discovery.discover(HOMEPAGE)

        assert result.links == []
        assert result.strategy is None
        assert len(result) == 0

    @pytest.mark.asyncio
    async def test_require_raises_empty_result(self):
        discovery = LinkDiscovery([RenderedLinksStrategy(FakeRenderer(links=[]))])

        with pytest.raises(EmptyResultError):
            await discovery.discover(HOMEPAGE, require=True)

    @pytest.mark.asyncio
    async def test_rendered_links_deduplicated(self):
        renderer = FakeRenderer(links=["https://example.com/a", "https://example.com/a", "https://example.com/b"])
        strategy = RenderedLinksStrategy(renderer)

        assert await strategy.try_discover(HOMEPAGE) == ["https://example.com/a", "https://example.com/b"]

    @pytest.mark.asyncio
    async def test_sitemap_url_built_from_homepage_with_trailing_slash(self):
        fetcher = FakeFetcher({"https://example.com/sitemap.xml": XML_SITEMAP})
        strategy = XmlSitemapStrategy(fetcher)

        await strategy.try_discover("https://example.com/")

        assert fetcher.requested == ["https://example.com/sitemap.xml"]

    @pytest.mark.asyncio
    async def test_html_strategy_propagates_network_error(self):
        strategy = HtmlSitemapStrategy(FakeFetcher({}), "/sitemap")

        with pytest.raises(NetworkError):
            await strategy.try_discover(HOMEPAGE)


class TestDiscoveryThroughFetcher:
    """Discovery over a real RateLimitedFetcher backed by a mock transport."""

    @pytest.mark.asyncio
    async def test_redirect_loop_on_xml_sitemap_falls_through(self):
        """A sitemap.xml that redirects to itself moves on to /sitemap."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/sitemap.xml":
                return httpx.Response(301, headers={"Location": str(request.url)})
            if request.url.path == "/sitemap":
                return httpx.Response(200, text=HTML_SITEMAP)
            return httpx.Response(404)

        async def no_sleep(seconds):
            return None

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        renderer = FakeRenderer(links=["https://example.com/a", "https://example.com/b", "https://example.com/c"])

        async with client:
            fetcher = RateLimitedFetcher(
                NoopRateLimiter(),
                FetchConfig(max_jitter=0.0),
                client=client,
                sleep=no_sleep,
            )
            discovery = LinkDiscovery(build_default_strategies(fetcher, renderer))
            result = await discovery.discover(HOMEPAGE)

        assert result.strategy == "html-sitemap:/sitemap"
        assert "https://example.com/shop/item-1" in result.links
        assert renderer.scraped == []
