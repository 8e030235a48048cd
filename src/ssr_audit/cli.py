"""Command-line interface for the SSR gap audit."""

import asyncio
import sys
from pathlib import Path
from typing import List

from ssr_audit.browser_renderer import BrowserRenderer
from ssr_audit.config import AuditConfig
from ssr_audit.framework_detector import FrameworkDetector
from ssr_audit.infrastructure import RateLimitedFetcher, SlidingWindowRateLimiter
from ssr_audit.link_discovery import LinkDiscovery, build_default_strategies
from ssr_audit.logging_config import setup_logging
from ssr_audit.models import SiteAudit
from ssr_audit.orchestrator import BatchRunner, ReportBuilder, SiteAuditor
from ssr_audit.report_generator import ReportGenerator
from ssr_audit.site_io import ResultWriter, read_site_urls, timestamped_output_path
from ssr_audit.ssr_analyzer import DualRenderAnalyzer
from ssr_audit.word_cloud import WordCloudRenderer


async def run_audit(config: AuditConfig, urls: List[str], output_path: Path) -> List[SiteAudit]:
    """Wire the pipeline from config and audit every site.

    Args:
        config: Audit configuration
        urls: Site URLs in input order
        output_path: CSV file for result rows

    Returns:
        One SiteAudit per input URL
    """
    limiter = SlidingWindowRateLimiter(config.rate_limit_config())

    async with RateLimitedFetcher(limiter, config.fetch_config()) as fetcher, \
            BrowserRenderer(config.browser_config()) as renderer:
        report_builder = None
        if config.generate_reports:
            report_builder = ReportBuilder(
                ReportGenerator(output_dir=config.output_dir),
                WordCloudRenderer(renderer),
            )

        auditor = SiteAuditor(
            detector=FrameworkDetector(),
            discovery=LinkDiscovery(build_default_strategies(fetcher, renderer)),
            analyzer=DualRenderAnalyzer(renderer),
            renderer=renderer,
            report_builder=report_builder,
        )
        runner = BatchRunner(auditor, ResultWriter(output_path))
        return await runner.run(urls)


def print_summary(audits: List[SiteAudit], output_path: Path) -> None:
    """Print a short per-site summary."""
    print(f"\n{'=' * 60}")
    print(f"SSR Audit: {len(audits)} site(s)")
    print(f"{'=' * 60}")
    for audit in audits:
        for row in audit.rows:
            percentage = (
                f"{row.ssr_percentage:.2f}%" if row.is_numeric else row.ssr_percentage
            )
            depth = row.depth.value if hasattr(row.depth, "value") else row.depth
            print(f"  • {row.analyzed_url} [{depth}] {percentage}")
        if audit.report_path:
            print(f"    Report: {audit.report_path}")
    print(f"\nResults written to {output_path}\n")


def main():
    """Main CLI entry point."""
    import argparse

    config = AuditConfig.from_env()

    parser = argparse.ArgumentParser(
        description="SSR Audit - Measure how much page content is visible without JavaScript"
    )
    parser.add_argument(
        "--input",
        "-i",
        default=config.input_file,
        help=f"CSV file with a 'url' column (default: {config.input_file})",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        default=config.output_dir,
        help="Directory for the results CSV and reports (default: current directory)",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip word cloud and HTML report generation",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=config.log_level.upper(),
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=config.log_file,
        help="Write logs to file in addition to console",
    )

    args = parser.parse_args()

    setup_logging(level=args.log_level, log_file=args.log_file)

    config.input_file = args.input
    config.output_dir = args.output_dir
    if args.no_report:
        config.generate_reports = False

    try:
        urls = read_site_urls(config.input_file)
    except (OSError, ValueError) as e:
        print(f"Error: could not read input file: {e}")
        sys.exit(1)

    output_path = timestamped_output_path(config.output_dir)
    audits = asyncio.run(run_audit(config, urls, output_path))
    print_summary(audits, output_path)


if __name__ == "__main__":
    main()
