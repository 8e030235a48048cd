"""Data models for SSR gap analysis."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union
from urllib.parse import urlparse

from ssr_audit.constants import (
    HIDDEN_FROM_NO_SCRIPT_COLOR,
    RESULT_COLUMNS,
    VISIBLE_TO_BOTH_COLOR,
)


class PageDepth(str, Enum):
    """Position of an analyzed page within the site."""
    HOMEPAGE = "Homepage"
    MID = "Mid"
    DEEP = "Deep"


@dataclass
class Site:
    """A website taken from one input row."""

    base_url: str

    @property
    def homepage_url(self) -> str:
        """Scheme and host of the base URL, without path."""
        parsed = urlparse(self.base_url)
        return f"{parsed.scheme}://{parsed.netloc}"


@dataclass
class PageSelection:
    """Representative pages chosen from the discovered links."""

    homepage: Optional[str] = None
    mid_page: Optional[str] = None
    deep_page: Optional[str] = None

    def pages(self) -> Iterator[tuple[str, PageDepth]]:
        """Yield the selected pages in Homepage, Mid, Deep order."""
        for url, depth in (
            (self.homepage, PageDepth.HOMEPAGE),
            (self.mid_page, PageDepth.MID),
            (self.deep_page, PageDepth.DEEP),
        ):
            if url:
                yield url, depth


@dataclass
class RenderCapture:
    """HTML and visible text captured from one render of a page."""

    url: str
    html: str
    text: str
    javascript_enabled: bool
    title: Optional[str] = None


@dataclass
class PageAnalysis:
    """Both renders of a page and the resulting SSR ratio."""

    url: str
    ssr_percentage: float
    page_title: Optional[str]
    initial: RenderCapture  # scripting disabled
    final: RenderCapture  # scripting enabled

    @property
    def initial_html(self) -> str:
        return self.initial.html

    @property
    def final_html(self) -> str:
        return self.final.html


@dataclass
class SSRResult:
    """One output row: the SSR percentage of an analyzed page.

    ssr_percentage and depth hold the "N/A" / "Error" markers for skipped and
    failed sites.
    """

    base_url: str
    analyzed_url: str
    is_framework_detected: bool
    ssr_percentage: Union[float, str]
    depth: Union[PageDepth, str]

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.ssr_percentage, (int, float))

    def to_row(self) -> dict[str, str]:
        """Convert to an output record keyed by column title."""
        if self.is_numeric:
            percentage = f"{self.ssr_percentage:.2f}"
        else:
            percentage = str(self.ssr_percentage)

        depth = self.depth.value if isinstance(self.depth, PageDepth) else str(self.depth)

        values = (
            self.base_url,
            self.analyzed_url,
            str(self.is_framework_detected).lower(),
            percentage,
            depth,
        )
        return dict(zip(RESULT_COLUMNS, values))


@dataclass
class WordDiffEntry:
    """A word seen by the scripting renderer, with its visibility to crawlers."""

    word: str
    weight: int
    visible_to_no_script: bool

    @property
    def color_tag(self) -> str:
        return VISIBLE_TO_BOTH_COLOR if self.visible_to_no_script else HIDDEN_FROM_NO_SCRIPT_COLOR

    def as_triple(self) -> tuple[str, int, str]:
        return (self.word, self.weight, self.color_tag)


@dataclass
class WorstPage:
    """The analyzed page with the lowest SSR percentage for a site."""

    result: SSRResult
    analysis: PageAnalysis

    @property
    def ssr_percentage(self) -> float:
        return self.analysis.ssr_percentage

    @property
    def unreadable_percentage(self) -> float:
        return round(100 - self.analysis.ssr_percentage, 2)


@dataclass
class SiteAudit:
    """Everything produced while auditing one site."""

    site: Site
    rows: list[SSRResult] = field(default_factory=list)
    worst_page: Optional[WorstPage] = None
    report_path: Optional[Path] = None
    error: Optional[str] = None
