"""Tests for React framework detection."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock

import pytest

from ssr_audit.exceptions import RenderError
from ssr_audit.framework_detector import (
    DEFAULT_SIGNALS,
    DetectionResult,
    DocumentSnapshot,
    FrameworkDetector,
    JsxMarkupSignal,
    ScriptSignal,
    SelectorSignal,
    Signal,
)


PLAIN_HTML = """
<html>
<head><title>Plain</title><script src="/static/app.js"></script></head>
<body><h1>Welcome</h1><script>console.log("hello");</script></body>
</html>
"""


def make_page(html=PLAIN_HTML, evaluate_result=False):
    """Create a mock Playwright page."""
    page = Mock()
    page.content = AsyncMock(return_value=html)
    page.evaluate = AsyncMock(return_value=evaluate_result)
    return page


class StubSignal(Signal):
    """Signal with a fixed outcome that records whether it ran."""

    def __init__(self, name, result=False, error=None):
        self.name = name
        self.result = result
        self.error = error
        self.calls = 0

    async def probe(self, snapshot):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class FakeRenderer:
    """Renderer whose open_page yields a prepared page."""

    def __init__(self, page=None, error=None):
        self.page = page
        self.error = error
        self.opened = []

    @asynccontextmanager
    async def open_page(self, url=None, javascript_enabled=True, wait_until="networkidle"):
        self.opened.append((url, javascript_enabled, wait_until))
        if self.error is not None:
            raise self.error
        yield self.page


class TestMarkupSignals:
    """Each markup signal against synthetic HTML."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("html,signal", [
        ('<html><body><div data-reactroot=""><p>x</p></div></body></html>', "marker-attribute"),
        ('<html><body><div data-reactid=".0">x</div></body></html>', "marker-attribute"),
        ('<html><head><script src="/js/react.min.js"></script></head><body></body></html>', "bundle-filename"),
        ('<html><head><script src="https://cdn/react.production.min.js"></script></head></html>', "bundle-filename"),
        ("<html><body><script>ReactDOM.render(app, root)</script></body></html>", "api-call-site"),
        ("<html><body><script>var el = React.createElement('div')</script></body></html>", "api-call-site"),
        ("<html><body><script>const tree = <App title='x' /></script></body></html>", "jsx-markup"),
        ("<html><body><!-- react-empty: 1 --></body></html>", "jsx-markup"),
        ('<html><body><script id="__NEXT_DATA__" type="application/json">{}</script></body></html>', "next-data"),
        ('<html><body><div id="___gatsby"></div></body></html>', "gatsby-root"),
    ])
    async def test_signal_detected(self, html, signal):
        result = await FrameworkDetector().detect_html(html)

        assert result.detected is True
        assert result.signal == signal

    @pytest.mark.asyncio
    async def test_plain_html_not_detected(self):
        result = await FrameworkDetector().detect_html(PLAIN_HTML)

        assert result == DetectionResult(detected=False)
        assert not result

    @pytest.mark.asyncio
    async def test_lowercase_tags_are_not_jsx(self):
        html = "<html><body><script>document.body.innerHTML = '<div>hi</div>'</script></body></html>"

        assert await JsxMarkupSignal().probe(DocumentSnapshot.from_html(html)) is False

    @pytest.mark.asyncio
    async def test_selector_signal_on_live_page_reads_content(self):
        page = make_page('<html><body><div id="___gatsby"></div></body></html>')
        signal = SelectorSignal("gatsby-root", "#___gatsby")

        assert await signal.probe(DocumentSnapshot(page)) is True
        page.content.assert_awaited_once()


class TestScriptSignals:
    """Runtime signals evaluated in the live page."""

    @pytest.mark.asyncio
    async def test_global_runtime_on_live_page(self):
        page = make_page(evaluate_result=True)

        result = await FrameworkDetector().detect(page)

        assert result.detected is True
        assert result.signal == "global-runtime"
        page.evaluate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_script_signal_never_matches_static_html(self):
        signal = ScriptSignal("global-runtime", "() => true")

        assert await signal.probe(DocumentSnapshot.from_html(PLAIN_HTML)) is False

    @pytest.mark.asyncio
    async def test_live_page_without_signals(self):
        page = make_page()

        result = await FrameworkDetector().detect(page)

        assert result.detected is False
        # One content() call shared by all markup signals
        page.content.assert_awaited_once()
        script_signals = [s for s in DEFAULT_SIGNALS if isinstance(s, ScriptSignal)]
        assert page.evaluate.await_count == len(script_signals)


class TestDetectorOrdering:
    """Signal priority and failure handling."""

    @pytest.mark.asyncio
    async def test_stops_at_first_match(self):
        first = StubSignal("first", result=False)
        second = StubSignal("second", result=True)
        third = StubSignal("third", result=True)

        result = await FrameworkDetector([first, second, third]).detect_html("<html></html>")

        assert result.signal == "second"
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)

    @pytest.mark.asyncio
    async def test_failing_signal_is_skipped(self):
        broken = StubSignal("broken", error=RuntimeError("evaluation failed"))
        working = StubSignal("working", result=True)

        result = await FrameworkDetector([broken, working]).detect_html("<html></html>")

        assert result.detected is True
        assert result.signal == "working"

    @pytest.mark.asyncio
    async def test_all_failing_signals_means_not_detected(self):
        signals = [StubSignal(f"s{i}", error=ValueError("bad")) for i in range(3)]

        result = await FrameworkDetector(signals).detect_html("<html></html>")

        assert result.detected is False
        assert all(signal.calls == 1 for signal in signals)

    def test_default_signal_order(self):
        names = [signal.name for signal in FrameworkDetector().signals]

        assert names == [
            "global-runtime",
            "marker-attribute",
            "root-container",
            "container-key",
            "bundle-filename",
            "api-call-site",
            "jsx-markup",
            "next-data",
            "gatsby-root",
        ]


class TestDetectUrl:
    """Detection through the renderer."""

    @pytest.mark.asyncio
    async def test_renders_with_scripting(self):
        renderer = FakeRenderer(page=make_page('<html><body><div id="___gatsby"></div></body></html>'))

        result = await FrameworkDetector().detect_url(renderer, "https://example.com")

        assert result.signal == "gatsby-root"
        assert renderer.opened == [("https://example.com", True, "networkidle")]

    @pytest.mark.asyncio
    async def test_navigation_failure_propagates(self):
        renderer = FakeRenderer(error=RenderError("https://example.com", TimeoutError("slow")))

        with pytest.raises(RenderError):
            await FrameworkDetector().detect_url(renderer, "https://example.com")
