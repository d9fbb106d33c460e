"""Central configuration for the landing page pipeline."""

import warnings

# Suppress noisy third-party warnings (OpenSSL/LibreSSL, google-auth deprecations)
warnings.filterwarnings("ignore", message=".*OpenSSL.*")
warnings.filterwarnings("ignore", category=FutureWarning, module="google")

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent.parent
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(ROOT_DIR / "output" / "pages")))

# ── API Keys ───────────────────────────────────────────────────────────────
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GOOGLE_APPLICATION_CREDENTIALS_JSON = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON", "")
GOOGLE_CREDENTIALS_PATH = os.getenv("GOOGLE_CREDENTIALS_PATH", "service_account.json")

# ── Site ───────────────────────────────────────────────────────────────────
SITE_URL = os.getenv("SITE_URL", "https://webnova.ro")
SITE_NAME = os.getenv("SITE_NAME", "Webnova")
SEARCH_CONSOLE_SITE_URL = os.getenv("SEARCH_CONSOLE_SITE_URL", SITE_URL)

# ── Generation settings ────────────────────────────────────────────────────
# "anthropic", "gemini" or "fixture" (offline, canned responses)
GENERATION_PROVIDER = os.getenv("GENERATION_PROVIDER", "")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096

# ── HTTP / retry ───────────────────────────────────────────────────────────
HTTP_TIMEOUT = 30  # seconds, per request
RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 1.0  # seconds; 1, 2, 4, ...
RETRY_MAX_DELAY = 60.0

# ── Rate-limit courtesy delays (seconds) ───────────────────────────────────
# Indexing API quota: 200 publish requests/day per site, 600/minute burst.
INDEXING_DELAY = 0.1
ANALYTICS_DELAY = 0.2
DELAY_BETWEEN_UNITS = 1.0

# ── Google endpoints ───────────────────────────────────────────────────────
TOKEN_URL = "https://oauth2.googleapis.com/token"
INDEXING_API_BASE = "https://indexing.googleapis.com/v3/urlNotifications"
WEBMASTERS_API_BASE = "https://www.googleapis.com/webmasters/v3"
SEARCH_CONSOLE_API_BASE = "https://searchconsole.googleapis.com/v1"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

INDEXING_SCOPE = "https://www.googleapis.com/auth/indexing"
WEBMASTERS_SCOPE = "https://www.googleapis.com/auth/webmasters.readonly"

# ── Token lifecycle ────────────────────────────────────────────────────────
TOKEN_SAFETY_MARGIN = 60  # re-mint when this close to expiry
ASSERTION_LIFETIME = 3600


# ── Health classification policy ───────────────────────────────────────────


@dataclass(frozen=True)
class HealthThresholds:
    """Cut-offs used to classify page performance.

    The defaults come from a Romanian B2B site and are not tuned for any
    other market; pass your own instance to override them.
    """

    min_ctr: float = 0.02
    needs_attention_position: float = 10.0
    underperforming_position: float = 20.0
    high_impressions: int = 100
    min_clicks_for_impressions: int = 5
    low_traffic_clicks: int = 10


DEFAULT_HEALTH_THRESHOLDS = HealthThresholds()


# ── Pipeline run options ───────────────────────────────────────────────────


@dataclass
class PipelineConfig:
    base_url: str = SITE_URL
    site_name: str = SITE_NAME
    output_dir: Path = OUTPUT_DIR

    provider: str = "fixture"
    model: Optional[str] = None
    api_key: str = ""

    # Raw service-account JSON (string or dict); None disables Google calls
    google_credentials: Optional[object] = None
    search_console_site_url: str = SEARCH_CONSOLE_SITE_URL
    enable_indexing: bool = False
    enable_feedback: bool = False

    mock_mode: bool = True
    delay_between_units: float = DELAY_BETWEEN_UNITS
    indexing_delay: float = INDEXING_DELAY
    analytics_delay: float = ANALYTICS_DELAY
    thresholds: HealthThresholds = field(default_factory=HealthThresholds)

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Build a config from the environment-derived constants above.

        Falls back to the offline fixture provider when no API key is set.
        """
        provider = GENERATION_PROVIDER
        api_key = ""
        if not provider:
            if ANTHROPIC_API_KEY:
                provider = "anthropic"
            elif GEMINI_API_KEY:
                provider = "gemini"
            else:
                provider = "fixture"
        if provider == "anthropic":
            api_key = ANTHROPIC_API_KEY
        elif provider == "gemini":
            api_key = GEMINI_API_KEY

        credentials = GOOGLE_APPLICATION_CREDENTIALS_JSON or None
        if credentials is None and Path(GOOGLE_CREDENTIALS_PATH).exists():
            credentials = Path(GOOGLE_CREDENTIALS_PATH).read_text()

        config = cls(
            provider=provider,
            api_key=api_key,
            google_credentials=credentials,
            mock_mode=provider == "fixture",
        )
        return replace(config, **overrides)
