"""Internal link discovery with layered fallbacks.

Strategies are tried in order and the first one yielding links wins:

1. ``/sitemap.xml`` parsed as a standard XML sitemap
2. ``/sitemap`` parsed as an HTML listing page
3. ``/site-map`` parsed as an HTML listing page
4. The homepage rendered in a real browser, links read from the live DOM
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional
from urllib.parse import urljoin
from xml.etree import ElementTree as ET

from bs4 import BeautifulSoup

from ssr_audit.constants import (
    HTML_SITEMAP_PATHS,
    ROOT_RELATIVE_LINK_SELECTOR,
    SITEMAP_NAMESPACE,
    XML_SITEMAP_PATH,
)
from ssr_audit.exceptions import EmptyResultError, NetworkError, ParseError, RenderError

logger = logging.getLogger(__name__)


def dedupe(links: Iterable[str]) -> List[str]:
    """Remove exact duplicates, keeping first-seen order."""
    return list(dict.fromkeys(links))


def sitemap_url(homepage_url: str, path: str) -> str:
    return urljoin(homepage_url.rstrip("/") + "/", path)


def parse_xml_sitemap(content: str, source_url: str) -> List[str]:
    """Extract every <url><loc> value from a urlset document.

    Raises:
        ParseError: For malformed XML, a non-urlset root, or zero URLs
    """
    content = re.sub(r'<!DOCTYPE[^>]*>', '', content).strip()
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ParseError(source_url, f"invalid XML: {e}") from e

    root_tag = root.tag.split('}')[-1]
    if root_tag != 'urlset':
        raise ParseError(source_url, f"unexpected root element <{root_tag}>")

    urls = []
    for url_elem in root:
        if url_elem.tag.split('}')[-1] != 'url':
            continue

        loc = url_elem.find(f'{{{SITEMAP_NAMESPACE}}}loc')
        if loc is None:
            loc = url_elem.find('loc')

        if loc is not None and loc.text and loc.text.strip():
            urls.append(loc.text.strip())

    if not urls:
        raise ParseError(source_url, "sitemap contains no URLs")

    return dedupe(urls)


def extract_root_relative_links(html: str, base_url: str) -> List[str]:
    """Resolve every root-relative anchor in an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    return dedupe(
        urljoin(base_url, anchor["href"])
        for anchor in soup.select(ROOT_RELATIVE_LINK_SELECTOR)
    )


class DiscoveryStrategy(ABC):
    """One way of finding a site's internal pages."""

    name: str = "strategy"

    @abstractmethod
    async def try_discover(self, homepage_url: str) -> List[str]:
        """Return discovered links.

        Raises:
            NetworkError: If the source could not be fetched
            ParseError: If the source was unusable
            RenderError: If a browser render failed
        """


class XmlSitemapStrategy(DiscoveryStrategy):
    """Reads the standard XML sitemap."""

    def __init__(self, fetcher, path: str = XML_SITEMAP_PATH):
        self.fetcher = fetcher
        self.path = path
        self.name = f"xml-sitemap:{path}"

    async def try_discover(self, homepage_url: str) -> List[str]:
        url = sitemap_url(homepage_url, self.path)
        logger.info(f"Attempting to fetch sitemap from {url}")
        response = await self.fetcher.fetch(url)
        links = parse_xml_sitemap(response.text, url)
        logger.info(f"XML sitemap parsed for {homepage_url}. Found {len(links)} links.")
        return links


class HtmlSitemapStrategy(DiscoveryStrategy):
    """Reads an HTML page that lists the site's pages."""

    def __init__(self, fetcher, path: str):
        self.fetcher = fetcher
        self.path = path
        self.name = f"html-sitemap:{path}"

    async def try_discover(self, homepage_url: str) -> List[str]:
        url = sitemap_url(homepage_url, self.path)
        logger.info(f"Attempting to fetch sitemap from {url}")
        response = await self.fetcher.fetch(url)
        links = extract_root_relative_links(response.text, homepage_url)
        if not links:
            raise ParseError(url, "no root-relative links")
        logger.info(f"HTML sitemap parsed for {homepage_url}. Found {len(links)} links.")
        return links


class RenderedLinksStrategy(DiscoveryStrategy):
    """Scrapes links from the homepage after client-side rendering."""

    name = "rendered-homepage"

    def __init__(self, renderer):
        self.renderer = renderer

    async def try_discover(self, homepage_url: str) -> List[str]:
        return dedupe(await self.renderer.scrape_links(homepage_url))


@dataclass
class DiscoveryResult:
    """Links found for a site and the strategy that found them."""
    links: List[str] = field(default_factory=list)
    strategy: Optional[str] = None

    def __len__(self) -> int:
        return len(self.links)


class LinkDiscovery:
    """Runs discovery strategies in order until one yields links."""

    def __init__(self, strategies: List[DiscoveryStrategy]):
        self.strategies = list(strategies)

    async def discover(self, homepage_url: str, require: bool = False) -> DiscoveryResult:
        """
        Find internal page URLs for a site.

        Strategy failures are logged and never propagate. When every strategy
        fails or finds nothing, the result is empty.

        Args:
            homepage_url: Scheme and host of the site
            require: Raise instead of returning an empty result

        Returns:
            DiscoveryResult with links in source order

        Raises:
            EmptyResultError: If require is set and no links were found
        """
        for strategy in self.strategies:
            try:
                links = await strategy.try_discover(homepage_url)
            except (NetworkError, ParseError, RenderError) as e:
                logger.warning(f"Discovery via {strategy.name} failed for {homepage_url}: {e}")
                continue

            if links:
                logger.info(f"Discovered {len(links)} links for {homepage_url} via {strategy.name}")
                return DiscoveryResult(links=links, strategy=strategy.name)

            logger.warning(f"Discovery via {strategy.name} found no links for {homepage_url}")

        logger.error(f"No internal links found for {homepage_url}")
        if require:
            raise EmptyResultError(homepage_url)
        return DiscoveryResult()


def build_default_strategies(fetcher, renderer) -> List[DiscoveryStrategy]:
    """XML sitemap, both HTML sitemap pages, then the rendered homepage."""
    strategies: List[DiscoveryStrategy] = [XmlSitemapStrategy(fetcher)]
    strategies.extend(HtmlSitemapStrategy(fetcher, path) for path in HTML_SITEMAP_PATHS)
    strategies.append(RenderedLinksStrategy(renderer))
    return strategies
