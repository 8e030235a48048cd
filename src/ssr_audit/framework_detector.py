"""React-family framework detection.

Detection runs a fixed list of signals against one fully rendered page and
stops at the first one that matches. Runtime signals evaluate JavaScript in the
live page; markup signals inspect the serialized DOM, so they can also run on
static HTML.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class DocumentSnapshot:
    """Lazily captured view of a page shared by all signals in one detection run."""

    def __init__(self, page=None, html: Optional[str] = None):
        self.page = page
        self._html = html
        self._soup: Optional[BeautifulSoup] = None

    @classmethod
    def from_html(cls, html: str) -> "DocumentSnapshot":
        return cls(page=None, html=html)

    @property
    def is_live(self) -> bool:
        return self.page is not None

    async def markup(self) -> str:
        if self._html is None:
            self._html = await self.page.content() if self.page is not None else ""
        return self._html

    async def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(await self.markup(), "html.parser")
        return self._soup

    async def inline_script_text(self) -> str:
        soup = await self.soup()
        return "\n".join(script.get_text() for script in soup.find_all("script"))


class Signal(ABC):
    """A single pass/fail probe for the framework."""

    name: str = "signal"

    @abstractmethod
    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        """Return True if the signal is present."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ScriptSignal(Signal):
    """Evaluates a JavaScript predicate in the live page.

    Static snapshots have no runtime, so the signal never matches there.
    """

    def __init__(self, name: str, expression: str):
        self.name = name
        self.expression = expression

    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        if not snapshot.is_live:
            return False
        return bool(await snapshot.page.evaluate(self.expression))


class SelectorSignal(Signal):
    """Matches when any element satisfies a CSS selector."""

    def __init__(self, name: str, selector: str):
        self.name = name
        self.selector = selector

    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        soup = await snapshot.soup()
        return soup.select_one(self.selector) is not None


class MarkupSubstringSignal(Signal):
    """Matches when the serialized document contains any of the given strings."""

    def __init__(self, name: str, needles: Sequence[str]):
        self.name = name
        self.needles = tuple(needles)

    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        markup = await snapshot.markup()
        return any(needle in markup for needle in self.needles)


class InlineScriptSignal(Signal):
    """Matches when inline script text contains any of the given strings."""

    def __init__(self, name: str, needles: Sequence[str]):
        self.name = name
        self.needles = tuple(needles)

    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        scripts = await snapshot.inline_script_text()
        return any(needle in scripts for needle in self.needles)


class JsxMarkupSignal(Signal):
    """Matches JSX-like capitalized tags in inline scripts or React's empty-render comment."""

    name = "jsx-markup"
    JSX_PATTERN = re.compile(r"<[A-Z][A-Za-z]*")
    EMPTY_COMMENT = "<!-- react-empty: "

    async def probe(self, snapshot: DocumentSnapshot) -> bool:
        scripts = await snapshot.inline_script_text()
        if self.JSX_PATTERN.search(scripts):
            return True
        return self.EMPTY_COMMENT in await snapshot.markup()


DEFAULT_SIGNALS: List[Signal] = [
    ScriptSignal(
        "global-runtime",
        "() => typeof window.React !== 'undefined'",
    ),
    SelectorSignal("marker-attribute", "[data-reactroot], [data-reactid]"),
    ScriptSignal(
        "root-container",
        "() => Array.from(document.querySelectorAll('*'))"
        ".some(e => e._reactRootContainer !== undefined)",
    ),
    ScriptSignal(
        "container-key",
        "() => Array.from(document.querySelectorAll('*'))"
        ".some(e => Object.keys(e).some(k => k.startsWith('__reactContainer')))",
    ),
    MarkupSubstringSignal(
        "bundle-filename",
        ("react.js", "react.min.js", "react.production.min.js", "react.development.js"),
    ),
    InlineScriptSignal(
        "api-call-site",
        (
            "React.createElement",
            "ReactDOM.render",
            "window.React",
            "window.__REACT_DEVTOOLS_GLOBAL_HOOK__",
        ),
    ),
    JsxMarkupSignal(),
    SelectorSignal("next-data", "script#__NEXT_DATA__"),
    SelectorSignal("gatsby-root", "#___gatsby"),
]


@dataclass
class DetectionResult:
    """Outcome of a detection run."""
    detected: bool
    signal: Optional[str] = None

    def __bool__(self) -> bool:
        return self.detected


class FrameworkDetector:
    """Decides whether a page is built with React (including Next.js and Gatsby)."""

    def __init__(self, signals: Optional[List[Signal]] = None):
        self.signals = list(signals) if signals is not None else list(DEFAULT_SIGNALS)

    async def _run(self, snapshot: DocumentSnapshot) -> DetectionResult:
        for signal in self.signals:
            try:
                matched = await signal.probe(snapshot)
            except Exception as e:
                logger.warning(f"Signal {signal.name} could not be evaluated: {e}")
                continue

            if matched:
                logger.info(f"React detected via {signal.name}")
                return DetectionResult(detected=True, signal=signal.name)

        logger.info("React not detected")
        return DetectionResult(detected=False)

    async def detect(self, page) -> DetectionResult:
        """
        Run every signal against a live, fully rendered page.

        Args:
            page: Playwright page with scripting enabled

        Returns:
            DetectionResult naming the first matching signal
        """
        return await self._run(DocumentSnapshot(page))

    async def detect_html(self, html: str) -> DetectionResult:
        """Run the markup signals against static HTML."""
        return await self._run(DocumentSnapshot.from_html(html))

    async def detect_url(self, renderer, url: str) -> DetectionResult:
        """
        Render a URL with scripting enabled and detect while the page is open.

        Raises:
            RenderError: If navigation fails
        """
        logger.info(f"Detecting React on {url}")
        async with renderer.open_page(url, javascript_enabled=True, wait_until="networkidle") as page:
            return await self.detect(page)
