"""
Browser configuration for Playwright-based rendering.

This module provides a validated Pydantic configuration model for all browser-related
settings and the default instance used when a renderer is built without one.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ssr_audit.constants import DEFAULT_SETTLE_DELAY_MS, MOBILE_VIEWPORT


MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class BrowserConfig(BaseModel):
    """
    Configuration for the Playwright-based BrowserRenderer.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode (no visible UI)"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use for rendering"
    )

    timeout: int = Field(
        default=30000,
        description="Page load timeout in milliseconds",
        ge=1000,
        le=300000
    )

    viewport: Dict[str, int] = Field(
        default_factory=lambda: dict(MOBILE_VIEWPORT),
        description="Viewport used for every render"
    )

    mobile: bool = Field(
        default=True,
        description="Emulate a touch-enabled mobile device"
    )

    user_agent: Optional[str] = Field(
        default=MOBILE_USER_AGENT,
        description="User agent for rendering contexts. None keeps the browser default."
    )

    settle_delay_ms: int = Field(
        default=DEFAULT_SETTLE_DELAY_MS,
        description="Extra wait after network idle for late client-side rendering",
        ge=0,
        le=60000
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Additional browser launch arguments (e.g., '--disable-http2')"
    )

    class Config:
        """Pydantic model configuration."""
        frozen = False
        validate_assignment = True

    def context_options(self, javascript_enabled: bool = True) -> dict:
        """Keyword arguments for Browser.new_context()."""
        options = {
            "viewport": dict(self.viewport),
            "is_mobile": self.mobile,
            "has_touch": self.mobile,
            "java_script_enabled": javascript_enabled,
        }
        if self.user_agent:
            options["user_agent"] = self.user_agent
        return options


DEFAULT_CONFIG = BrowserConfig()
"""
Default configuration: headless Chromium with a 375x667 mobile viewport.
"""
