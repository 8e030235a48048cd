"""Per-site audit pipeline and batch runner.

Each site moves through an explicit state machine:

    START -> DETECT_FRAMEWORK -> EMIT_SKIP_ROW -> DONE          (not React)
    START -> DETECT_FRAMEWORK -> DISCOVER_LINKS -> SELECT_PAGES
          -> ANALYZE_PAGES -> PICK_WORST -> EMIT_ROWS -> BUILD_REPORT -> DONE

Any exception inside a site's run is converted into an "Error" row for that
site; the batch always moves on to the next site.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from ssr_audit.constants import (
    ERROR_MARKER,
    MIN_DISCOVERED_LINKS,
    NOT_APPLICABLE,
)
from ssr_audit.framework_detector import DetectionResult
from ssr_audit.link_discovery import LinkDiscovery, RenderedLinksStrategy
from ssr_audit.models import (
    PageAnalysis,
    PageSelection,
    SSRResult,
    Site,
    SiteAudit,
    WorstPage,
)
from ssr_audit.page_selector import select_pages
from ssr_audit.word_diff import diff_words

logger = logging.getLogger(__name__)


class AuditState(str, Enum):
    """States of a single site audit."""
    START = "start"
    DETECT_FRAMEWORK = "detect_framework"
    EMIT_SKIP_ROW = "emit_skip_row"
    DISCOVER_LINKS = "discover_links"
    SELECT_PAGES = "select_pages"
    ANALYZE_PAGES = "analyze_pages"
    PICK_WORST = "pick_worst"
    EMIT_ROWS = "emit_rows"
    BUILD_REPORT = "build_report"
    DONE = "done"


@dataclass
class AuditRun:
    """Mutable working state for one site."""
    site: Site
    detection: Optional[DetectionResult] = None
    links: List[str] = field(default_factory=list)
    selection: PageSelection = field(default_factory=PageSelection)
    analyses: List[tuple[SSRResult, PageAnalysis]] = field(default_factory=list)
    worst_page: Optional[WorstPage] = None
    rows: List[SSRResult] = field(default_factory=list)
    report_path: Optional[Path] = None
    history: List[AuditState] = field(default_factory=list)


class ReportBuilder:
    """Builds the word-diff report for a site's worst page."""

    def __init__(self, report_generator, word_cloud_renderer=None):
        self.report_generator = report_generator
        self.word_cloud_renderer = word_cloud_renderer

    async def build(self, worst_page: WorstPage, base_url: str) -> Path:
        analysis = worst_page.analysis
        entries = diff_words(analysis.final.text, analysis.initial.text)

        image = None
        if self.word_cloud_renderer is not None:
            image = await self.word_cloud_renderer.render(entries)

        return self.report_generator.generate(
            entries=entries,
            page_title=analysis.page_title,
            base_url=base_url,
            unreadable_percentage=worst_page.unreadable_percentage,
            word_cloud_png=image,
        )


class SiteAuditor:
    """Runs the audit state machine for one site at a time."""

    def __init__(
        self,
        detector,
        discovery: LinkDiscovery,
        analyzer,
        renderer,
        report_builder: Optional[ReportBuilder] = None,
        link_fallback: Optional[LinkDiscovery] = None,
    ):
        """
        Args:
            detector: FrameworkDetector
            discovery: LinkDiscovery with the full strategy chain
            analyzer: DualRenderAnalyzer
            renderer: BrowserRenderer used for detection
            report_builder: Builds the worst-page report; None disables reports
            link_fallback: Discovery used when too few links were found.
                Defaults to scraping the rendered homepage.
        """
        self.detector = detector
        self.discovery = discovery
        self.analyzer = analyzer
        self.renderer = renderer
        self.report_builder = report_builder
        self.link_fallback = link_fallback or LinkDiscovery([RenderedLinksStrategy(renderer)])

        self._handlers: Dict[AuditState, Callable[[AuditRun], Awaitable[AuditState]]] = {
            AuditState.START: self._start,
            AuditState.DETECT_FRAMEWORK: self._detect_framework,
            AuditState.EMIT_SKIP_ROW: self._emit_skip_row,
            AuditState.DISCOVER_LINKS: self._discover_links,
            AuditState.SELECT_PAGES: self._select_pages,
            AuditState.ANALYZE_PAGES: self._analyze_pages,
            AuditState.PICK_WORST: self._pick_worst,
            AuditState.EMIT_ROWS: self._emit_rows,
            AuditState.BUILD_REPORT: self._build_report,
        }

    async def audit(self, url: str) -> SiteAudit:
        """
        Audit one site.

        Never raises: failures become an "Error" row appended after any rows
        already produced for the site.

        Args:
            url: Site URL from the input file

        Returns:
            SiteAudit with at least one row
        """
        run = AuditRun(site=Site(base_url=url))
        state = AuditState.START

        try:
            while state is not AuditState.DONE:
                run.history.append(state)
                state = await self._handlers[state](run)
        except Exception as e:
            logger.error(f"Error analyzing website {url} during {state.value}: {e}", exc_info=True)
            rows = run.rows or [result for result, _ in run.analyses]
            return SiteAudit(
                site=run.site,
                rows=rows + [self._error_row(run.site)],
                worst_page=None,
                error=str(e),
            )

        return SiteAudit(
            site=run.site,
            rows=run.rows,
            worst_page=run.worst_page,
            report_path=run.report_path,
        )

    async def _start(self, run: AuditRun) -> AuditState:
        logger.info(f"Analyzing website: {run.site.base_url}")
        return AuditState.DETECT_FRAMEWORK

    async def _detect_framework(self, run: AuditRun) -> AuditState:
        run.detection = await self.detector.detect_url(self.renderer, run.site.base_url)
        if not run.detection.detected:
            return AuditState.EMIT_SKIP_ROW
        return AuditState.DISCOVER_LINKS

    async def _emit_skip_row(self, run: AuditRun) -> AuditState:
        logger.info(f"Skipping analysis for {run.site.base_url} as it is not built with React.")
        run.rows = [
            SSRResult(
                base_url=run.site.base_url,
                analyzed_url=run.site.base_url,
                is_framework_detected=False,
                ssr_percentage=NOT_APPLICABLE,
                depth=NOT_APPLICABLE,
            )
        ]
        return AuditState.DONE

    async def _discover_links(self, run: AuditRun) -> AuditState:
        homepage_url = run.site.homepage_url
        result = await self.discovery.discover(homepage_url)
        run.links = result.links

        already_rendered = result.strategy == RenderedLinksStrategy.name
        if len(run.links) < MIN_DISCOVERED_LINKS and not already_rendered:
            logger.info(
                f"Not enough pages found for {homepage_url} ({len(run.links)}). "
                f"Falling back to scraping internal links..."
            )
            fallback = await self.link_fallback.discover(homepage_url)
            if fallback.links:
                run.links = fallback.links

        if not run.links:
            logger.warning(f"No internal links for {homepage_url}, analyzing the homepage only")
            run.links = [homepage_url]

        return AuditState.SELECT_PAGES

    async def _select_pages(self, run: AuditRun) -> AuditState:
        run.selection = select_pages(run.links)
        return AuditState.ANALYZE_PAGES

    async def _analyze_pages(self, run: AuditRun) -> AuditState:
        # One page at a time
        for page_url, depth in run.selection.pages():
            analysis = await self.analyzer.analyze(page_url)
            logger.info(f"{depth.value} page ({page_url}) SSR Percentage: {analysis.ssr_percentage:.2f}%")
            result = SSRResult(
                base_url=run.site.base_url,
                analyzed_url=page_url,
                is_framework_detected=True,
                ssr_percentage=analysis.ssr_percentage,
                depth=depth,
            )
            run.analyses.append((result, analysis))
        return AuditState.PICK_WORST

    async def _pick_worst(self, run: AuditRun) -> AuditState:
        for result, analysis in run.analyses:
            if run.worst_page is None or analysis.ssr_percentage < run.worst_page.ssr_percentage:
                run.worst_page = WorstPage(result=result, analysis=analysis)
        return AuditState.EMIT_ROWS

    async def _emit_rows(self, run: AuditRun) -> AuditState:
        run.rows = [result for result, _ in run.analyses]
        if run.worst_page is None:
            return AuditState.DONE
        return AuditState.BUILD_REPORT

    async def _build_report(self, run: AuditRun) -> AuditState:
        if self.report_builder is None:
            return AuditState.DONE

        try:
            run.report_path = await self.report_builder.build(run.worst_page, run.site.base_url)
        except Exception as e:
            # Rows stand without a report
            logger.error(f"Report generation failed for {run.site.base_url}: {e}", exc_info=True)
        return AuditState.DONE

    @staticmethod
    def _error_row(site: Site) -> SSRResult:
        return SSRResult(
            base_url=site.base_url,
            analyzed_url=site.base_url,
            is_framework_detected=False,
            ssr_percentage=ERROR_MARKER,
            depth=ERROR_MARKER,
        )


class BatchRunner:
    """Audits sites strictly one after another, in input order."""

    def __init__(self, auditor: SiteAuditor, writer):
        self.auditor = auditor
        self.writer = writer

    async def run(self, urls: List[str]) -> List[SiteAudit]:
        """
        Audit every site and write its rows as soon as it finishes.

        Returns:
            One SiteAudit per input URL, in input order
        """
        audits = []
        for url in urls:
            audit = await self.auditor.audit(url)
            self.writer.write_rows(audit.rows)
            logger.info(f"Analysis complete for {url}. {len(audit.rows)} row(s) written to {self.writer.path}")
            audits.append(audit)

        total_rows = sum(len(audit.rows) for audit in audits)
        logger.info(f"Analysis complete for all {len(audits)} websites. {total_rows} rows in {self.writer.path}")
        return audits
