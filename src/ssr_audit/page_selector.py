"""Representative page selection."""

import logging
import re
from typing import Sequence

from ssr_audit.constants import SEO_RELEVANT_KEYWORDS
from ssr_audit.models import PageSelection

logger = logging.getLogger(__name__)

SEO_RELEVANT_PATTERN = re.compile("|".join(SEO_RELEVANT_KEYWORDS), re.IGNORECASE)


def is_seo_relevant(url: str) -> bool:
    """Check whether the URL looks like a product listing, blog, or similar content page."""
    return SEO_RELEVANT_PATTERN.search(url) is not None


def select_pages(urls: Sequence[str]) -> PageSelection:
    """Pick a homepage, a mid-depth page and a deep page.

    The first URL is taken as the homepage. Mid and deep pages prefer
    SEO-relevant URLs: mid is the middle relevant URL when any exist, deep is
    the last relevant URL when at least two exist. Otherwise both fall back to
    the middle and last entries of the full list. With fewer than three URLs
    only the homepage is returned.
    """
    if not urls:
        return PageSelection()

    if len(urls) < 3:
        return PageSelection(homepage=urls[0])

    homepage = urls[0]
    relevant = [url for url in urls if is_seo_relevant(url)]

    mid_page = relevant[len(relevant) // 2] if relevant else urls[len(urls) // 2]
    deep_page = relevant[-1] if len(relevant) > 1 else urls[-1]

    logger.info(f"Selected pages: Homepage ({homepage}), Mid ({mid_page}), Deep ({deep_page})")
    return PageSelection(homepage=homepage, mid_page=mid_page, deep_page=deep_page)
