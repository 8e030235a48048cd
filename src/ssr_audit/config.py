from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
import os

from ssr_audit.constants import DEFAULT_INPUT_FILE, DEFAULT_SETTLE_DELAY_MS

load_dotenv()  # Loads variables from .env file


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AuditConfig:
    """Configuration for an SSR audit batch."""
    input_file: str = DEFAULT_INPUT_FILE
    output_dir: str = "."
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Shared fetch budget: max_requests per window_seconds
    max_requests: int = 20
    window_seconds: float = 60.0
    min_interval: float = 1.0

    # Per-request behaviour
    max_jitter: float = 1.0
    max_retries: int = 3
    backoff_base: float = 1.0
    timeout: float = 30.0
    user_agent: str = "SSR-Audit-Bot/1.0"

    # Rendering
    headless: bool = True
    browser_type: str = "chromium"
    navigation_timeout_ms: int = 30000
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS

    generate_reports: bool = True

    @classmethod
    def from_env(cls) -> "AuditConfig":
        """Load configuration from environment variables.

        Invalid numeric values fall back to the defaults.

        Returns:
            AuditConfig: Configuration instance with values from environment
        """
        defaults = cls()
        return cls(
            input_file=os.getenv("SSR_AUDIT_INPUT_FILE", defaults.input_file),
            output_dir=os.getenv("SSR_AUDIT_OUTPUT_DIR", defaults.output_dir),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_file=os.getenv("LOG_FILE"),
            max_requests=_env_int("SSR_AUDIT_MAX_REQUESTS", defaults.max_requests),
            window_seconds=_env_float("SSR_AUDIT_WINDOW_SECONDS", defaults.window_seconds),
            min_interval=_env_float("SSR_AUDIT_MIN_INTERVAL", defaults.min_interval),
            max_jitter=_env_float("SSR_AUDIT_MAX_JITTER", defaults.max_jitter),
            max_retries=_env_int("SSR_AUDIT_MAX_RETRIES", defaults.max_retries),
            backoff_base=_env_float("SSR_AUDIT_BACKOFF_BASE", defaults.backoff_base),
            timeout=_env_float("SSR_AUDIT_TIMEOUT", defaults.timeout),
            user_agent=os.getenv("SSR_AUDIT_USER_AGENT", defaults.user_agent),
            headless=_env_bool("SSR_AUDIT_HEADLESS", defaults.headless),
            browser_type=os.getenv("SSR_AUDIT_BROWSER_TYPE", defaults.browser_type),
            navigation_timeout_ms=_env_int(
                "SSR_AUDIT_NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms
            ),
            settle_delay_ms=_env_int("SSR_AUDIT_SETTLE_DELAY_MS", defaults.settle_delay_ms),
            generate_reports=_env_bool("SSR_AUDIT_GENERATE_REPORTS", defaults.generate_reports),
        )

    def rate_limit_config(self):
        from ssr_audit.infrastructure.rate_limiter import RateLimitConfig

        return RateLimitConfig(
            max_requests=self.max_requests,
            window_seconds=self.window_seconds,
            min_interval=self.min_interval,
        )

    def fetch_config(self):
        from ssr_audit.infrastructure.fetcher import FetchConfig

        return FetchConfig(
            max_jitter=self.max_jitter,
            max_retries=self.max_retries,
            backoff_base=self.backoff_base,
            timeout=self.timeout,
            user_agent=self.user_agent,
        )

    def browser_config(self):
        from ssr_audit.browser_config import BrowserConfig

        return BrowserConfig(
            headless=self.headless,
            browser_type=self.browser_type,
            timeout=self.navigation_timeout_ms,
            settle_delay_ms=self.settle_delay_ms,
        )
