"""SSR gap audit: how much of a site's content can a non-scripting crawler see."""

__version__ = "0.1.0"

from ssr_audit.browser_config import BrowserConfig
from ssr_audit.browser_renderer import BrowserRenderer
from ssr_audit.config import AuditConfig
from ssr_audit.exceptions import (
    AuditError,
    NetworkError,
    ParseError,
    RenderError,
    EmptyResultError,
)
from ssr_audit.framework_detector import FrameworkDetector, DetectionResult, Signal
from ssr_audit.link_discovery import LinkDiscovery, DiscoveryResult, build_default_strategies
from ssr_audit.models import (
    Site,
    PageDepth,
    PageSelection,
    RenderCapture,
    PageAnalysis,
    SSRResult,
    WordDiffEntry,
    WorstPage,
    SiteAudit,
)
from ssr_audit.orchestrator import SiteAuditor, BatchRunner, ReportBuilder, AuditState
from ssr_audit.page_selector import select_pages, is_seo_relevant
from ssr_audit.ssr_analyzer import DualRenderAnalyzer, calculate_ssr_percentage
from ssr_audit.word_diff import diff_words, word_frequencies

# Infrastructure
from ssr_audit.infrastructure import (
    SlidingWindowRateLimiter,
    NoopRateLimiter,
    RateLimitConfig,
    RateLimitedFetcher,
    FetchConfig,
)

__all__ = [
    # Core
    "SiteAuditor",
    "BatchRunner",
    "ReportBuilder",
    "AuditState",
    "FrameworkDetector",
    "DetectionResult",
    "Signal",
    "LinkDiscovery",
    "DiscoveryResult",
    "build_default_strategies",
    "DualRenderAnalyzer",
    "calculate_ssr_percentage",
    "select_pages",
    "is_seo_relevant",
    "diff_words",
    "word_frequencies",
    "BrowserRenderer",
    "BrowserConfig",
    "AuditConfig",
    # Models
    "Site",
    "PageDepth",
    "PageSelection",
    "RenderCapture",
    "PageAnalysis",
    "SSRResult",
    "WordDiffEntry",
    "WorstPage",
    "SiteAudit",
    # Errors
    "AuditError",
    "NetworkError",
    "ParseError",
    "RenderError",
    "EmptyResultError",
    # Infrastructure
    "SlidingWindowRateLimiter",
    "NoopRateLimiter",
    "RateLimitConfig",
    "RateLimitedFetcher",
    "FetchConfig",
]
