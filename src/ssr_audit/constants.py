# src/ssr_audit/constants.py
"""Centralized constants for the SSR gap audit.

User-configurable values (rate limits, retries, delays) live in config.py and
AuditConfig. The values here are fixed parts of the heuristics.
"""

# =============================================================================
# Link Discovery Constants
# =============================================================================

# Sitemap locations, tried in this order
XML_SITEMAP_PATH = "/sitemap.xml"
HTML_SITEMAP_PATHS = ("/sitemap", "/site-map")

# Standard sitemap namespace
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

# Anchors collected from HTML sitemaps and rendered homepages
ROOT_RELATIVE_LINK_SELECTOR = 'a[href^="/"]'

# Fewer discovered links than this triggers the rendered-homepage fallback
MIN_DISCOVERED_LINKS = 3


# =============================================================================
# Page Selection Constants
# =============================================================================

# URL fragments that mark a page as likely to matter for search visibility
SEO_RELEVANT_KEYWORDS = (
    "product",
    "blog",
    "articles",
    "post",
    "category",
    "news",
    "shop",
    "item",
    "service",
)


# =============================================================================
# Rendering Constants
# =============================================================================

# Mobile viewport used for every render
MOBILE_VIEWPORT = {"width": 375, "height": 667}

# Extra wait after network idle for late client-side rendering (milliseconds)
DEFAULT_SETTLE_DELAY_MS = 2000

# Elements whose text never counts as visible content
NON_VISIBLE_TAGS = ("script", "style")


# =============================================================================
# Word Frequency Constants
# =============================================================================

# Token length bounds (exclusive)
MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = 15

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "from", "this", "that", "have", "not", "but", "are",
})

# Word cloud colors
VISIBLE_TO_BOTH_COLOR = "#4CAF50"
HIDDEN_FROM_NO_SCRIPT_COLOR = "#808080"


# =============================================================================
# Output Constants
# =============================================================================

NOT_APPLICABLE = "N/A"
ERROR_MARKER = "Error"

RESULT_COLUMNS = (
    "Base URL",
    "Analyzed URL",
    "Is Framework Detected",
    "SSR Percentage",
    "Page Depth",
)

DEFAULT_INPUT_FILE = "word-cloud-input.csv"
OUTPUT_FILE_PREFIX = "word-cloud-output"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
