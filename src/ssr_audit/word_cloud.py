"""Word cloud rendering.

Draws the word-diff entries with wordcloud2.js in a blank browser page and
screenshots the canvas.
"""

import json
import logging
from typing import List, Optional

from ssr_audit.exceptions import RenderError
from ssr_audit.models import WordDiffEntry

logger = logging.getLogger(__name__)

WORDCLOUD_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/wordcloud2.js/1.1.1/wordcloud2.min.js"

CLOUD_WIDTH = 600
CLOUD_HEIGHT = 400

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Word Cloud</title>
  <script src="{script_url}"></script>
  <style>
    body {{ margin: 0; padding: 0; }}
    #word-cloud {{ width: {width}px; height: {height}px; }}
  </style>
</head>
<body>
  <canvas id="word-cloud" width="{width}" height="{height}"></canvas>
  <script>
    const wordList = {word_list};
    const colors = Object.fromEntries(wordList.map(w => [w[0], w[2]]));
    WordCloud(document.getElementById('word-cloud'), {{
      list: wordList.map(w => [w[0], w[1]]),
      weightFactor: 10,
      color: (word) => colors[word],
      backgroundColor: '#ffffff',
      gridSize: 8,
      rotateRatio: 0,
      drawOutOfBound: false,
      shrinkToFit: true,
    }});
  </script>
</body>
</html>
"""


def build_page(entries: List[WordDiffEntry]) -> str:
    """HTML page that draws the given entries on a canvas."""
    word_list = json.dumps([entry.as_triple() for entry in entries])
    return PAGE_TEMPLATE.format(
        script_url=WORDCLOUD_SCRIPT_URL,
        width=CLOUD_WIDTH,
        height=CLOUD_HEIGHT,
        word_list=word_list,
    )


class WordCloudRenderer:
    """Turns (word, weight, color) triples into a PNG image."""

    def __init__(self, renderer, draw_delay_ms: int = 2000):
        self.renderer = renderer
        self.draw_delay_ms = draw_delay_ms

    async def render(self, entries: List[WordDiffEntry]) -> Optional[bytes]:
        """
        Render the word cloud.

        Returns:
            PNG bytes, or None when there are no words to draw

        Raises:
            RenderError: If the page could not be drawn or captured
        """
        if not entries:
            logger.info("No words to draw, skipping word cloud")
            return None

        async with self.renderer.open_page() as page:
            try:
                await page.set_content(build_page(entries), wait_until="networkidle")
                await page.wait_for_selector("#word-cloud")
                await page.wait_for_timeout(self.draw_delay_ms)
                element = await page.query_selector("#word-cloud")
                image = await element.screenshot(type="png")
            except Exception as e:
                raise RenderError("word-cloud", e) from e

        logger.info(f"Word cloud rendered with {len(entries)} words")
        return image
