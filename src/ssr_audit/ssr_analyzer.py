"""Dual-render SSR analysis.

A page is rendered twice in separate browser contexts: once with JavaScript
disabled (what a non-scripting crawler sees) and once with JavaScript enabled
(what a user sees). The SSR percentage compares the visible text of the two.
"""

import logging
from typing import Optional

from ssr_audit.exceptions import RenderError
from ssr_audit.models import PageAnalysis

logger = logging.getLogger(__name__)


def calculate_ssr_percentage(initial_text: str, final_text: str) -> float:
    """Ratio of no-script text length to scripted text length, as a percentage.

    Returns 0.0 when the scripted render has no text. Rounded to two decimals.
    """
    final_length = len(final_text)
    if final_length == 0:
        return 0.0
    return round(len(initial_text) / final_length * 100, 2)


class DualRenderAnalyzer:
    """Renders a page with and without JavaScript and computes its SSR percentage."""

    def __init__(self, renderer, settle_delay_ms: Optional[int] = None):
        """
        Args:
            renderer: BrowserRenderer (or compatible) used for both passes
            settle_delay_ms: Extra wait after network idle in the scripted pass.
                Defaults to the renderer's configured delay.
        """
        self.renderer = renderer
        if settle_delay_ms is None:
            settle_delay_ms = renderer.config.settle_delay_ms
        self.settle_delay_ms = settle_delay_ms

    async def analyze(self, url: str) -> PageAnalysis:
        """
        Capture both renders of a URL.

        Args:
            url: Page to analyze

        Returns:
            PageAnalysis with both captures and the SSR percentage

        Raises:
            RenderError: If either render fails. Failures are not retried.
        """
        logger.info(f"Analyzing SSR for {url}")

        try:
            initial = await self.renderer.render(
                url,
                javascript_enabled=False,
                wait_until="domcontentloaded",
                capture_title=True,
            )
            final = await self.renderer.render(
                url,
                javascript_enabled=True,
                wait_until="networkidle",
                settle_delay_ms=self.settle_delay_ms,
            )
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(url, e) from e

        ssr_percentage = calculate_ssr_percentage(initial.text, final.text)
        logger.debug(
            f"{url}: {len(initial.text)} chars without JavaScript, "
            f"{len(final.text)} chars with JavaScript"
        )

        return PageAnalysis(
            url=url,
            ssr_percentage=ssr_percentage,
            page_title=initial.title,
            initial=initial,
            final=final,
        )
