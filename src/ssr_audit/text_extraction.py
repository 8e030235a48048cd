"""Visible text extraction from captured HTML."""

import re

from bs4 import BeautifulSoup

from ssr_audit.constants import NON_VISIBLE_TAGS

_WHITESPACE = re.compile(r"\s+")


def extract_visible_text(html: str) -> str:
    """Return the body's visible text with whitespace runs collapsed.

    Script and style contents are dropped. A document without a body yields
    an empty string.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    body = soup.body
    if body is None:
        return ""

    for element in body.find_all(NON_VISIBLE_TAGS):
        element.decompose()

    return _WHITESPACE.sub(" ", body.get_text()).strip()
