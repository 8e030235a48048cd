"""Error types raised by the audit pipeline."""

from typing import Optional


class AuditError(Exception):
    """Base class for all audit failures."""


class NetworkError(AuditError):
    """An HTTP fetch failed after exhausting its retries."""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {cause}")


class ParseError(AuditError):
    """A sitemap document could not be parsed or contained no links."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not parse {url}: {reason}")


class RenderError(AuditError):
    """Browser navigation or rendering failed."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to render {url}: {cause}")


class EmptyResultError(AuditError):
    """No candidate links were found after every discovery fallback."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No internal links found for {url}")
