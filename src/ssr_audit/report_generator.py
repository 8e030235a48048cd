"""HTML report generator using Jinja2 templates."""

import base64
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ssr_audit.constants import (
    HIDDEN_FROM_NO_SCRIPT_COLOR,
    TIMESTAMP_FORMAT,
    VISIBLE_TO_BOTH_COLOR,
)
from ssr_audit.models import WordDiffEntry

logger = logging.getLogger(__name__)


def report_filename(base_url: str, timestamp: Optional[datetime] = None) -> str:
    """email_<sanitized url>_<timestamp>.html"""
    if timestamp is None:
        timestamp = datetime.now()
    slug = re.sub(r"[^a-z0-9]", "_", base_url, flags=re.IGNORECASE).lower()
    return f"email_{slug}_{timestamp.strftime(TIMESTAMP_FORMAT)}.html"


class ReportGenerator:
    """Writes the per-site content gap report."""

    def __init__(self, output_dir: str = ".", template_dir: Optional[str] = None):
        """Initialize report generator.

        Args:
            output_dir: Directory reports are written to
            template_dir: Directory containing Jinja2 templates
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        template_path = Path(template_dir) if template_dir else Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(["html"]),
        )

    def render(
        self,
        entries: List[WordDiffEntry],
        page_title: Optional[str],
        base_url: str,
        unreadable_percentage: float,
        word_cloud_png: Optional[bytes] = None,
    ) -> str:
        """Render the report HTML."""
        template = self.env.get_template("report.html")
        image = base64.b64encode(word_cloud_png).decode("ascii") if word_cloud_png else None

        return template.render(
            entries=entries,
            page_title=page_title or base_url,
            base_url=base_url,
            unreadable_percentage=unreadable_percentage,
            word_cloud_image=image,
            total_words=len(entries),
            hidden_words=sum(1 for entry in entries if not entry.visible_to_no_script),
            visible_color=VISIBLE_TO_BOTH_COLOR,
            hidden_color=HIDDEN_FROM_NO_SCRIPT_COLOR,
        )

    def generate(
        self,
        entries: List[WordDiffEntry],
        page_title: Optional[str],
        base_url: str,
        unreadable_percentage: float,
        word_cloud_png: Optional[bytes] = None,
    ) -> Path:
        """Render the report and save it under a timestamped name.

        Returns:
            Path of the written file
        """
        html = self.render(entries, page_title, base_url, unreadable_percentage, word_cloud_png)
        path = self.output_dir / report_filename(base_url)
        path.write_text(html, encoding="utf-8")
        logger.info(f"Report saved as {path}")
        return path
