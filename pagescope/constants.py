"""Application-wide constants.

This module centralizes all magic numbers and configuration constants
to ensure a single source of truth and easier maintenance.

Constants are organized by category: extraction limits, classifier
thresholds, fetch timeouts, browser behaviour and summarization.
"""

# =============================================================================
# Extraction Limits
# =============================================================================

MAX_TABLES = 10
MAX_TABLE_ROWS = 50
MAX_TABLE_COLS = 20
MAX_LISTS = 30
MAX_LIST_ITEMS = 60
MAX_UNIQUE_COMPONENTS = 80
MAX_COMPONENT_CONTENT_CHARS = 300
MAX_IMAGES = 20
MAX_LINKS = 50

# Paragraphs shorter than this (after whitespace normalization) are dropped
MIN_PARAGRAPH_CHARS = 30

# Fallback description is the first paragraph cut to this length
DESCRIPTION_FALLBACK_CHARS = 160

NO_TITLE_PLACEHOLDER = "No title found"

# =============================================================================
# Classifier Thresholds
# =============================================================================

# Body text shorter than this means the page is a shell or a bot wall
MIN_BODY_TEXT_CHARS = 120

# Thresholds for "we got basically nothing" extractions
EMPTY_BODY_TEXT_CHARS = 200
EMPTY_MIN_PARAGRAPHS = 2
EMPTY_MAX_LINKS = 3

# =============================================================================
# Timeout Configuration (seconds)
# =============================================================================

# Overall budget for one rendering strategy
OVERALL_TIMEOUT_SECONDS = 25.0

# The lightweight fetch gets the smaller of the overall budget and 15s
HTTP_PHASE_TIMEOUT_SECONDS = min(OVERALL_TIMEOUT_SECONDS, 15.0)

BROWSER_PHASE_TIMEOUT_SECONDS = OVERALL_TIMEOUT_SECONDS

# Network timeout for the single lightweight GET
HTTP_REQUEST_TIMEOUT_SECONDS = 60.0

HTTP_MAX_REDIRECTS = 5

SUMMARIZER_TIMEOUT_SECONDS = 30.0

# =============================================================================
# Browser Configuration
# =============================================================================

BROWSER_LAUNCH_TIMEOUT_MS = 20_000
BROWSER_NAVIGATION_TIMEOUT_MS = 30_000
BROWSER_DEFAULT_TIMEOUT_MS = 15_000

# Optimistic wait for the DOM to hold meaningful text
BROWSER_MEANINGFUL_TEXT_CHARS = 300
BROWSER_MEANINGFUL_TEXT_TIMEOUT_MS = 8_000

# Network idle detection used before each extraction attempt
NETWORK_IDLE_WINDOW_MS = 750
NETWORK_IDLE_TIMEOUT_MS = 8_000

BROWSER_MAX_ATTEMPTS = 6

# Delay after scrolling is base + step * attempt index
SCROLL_DELAY_BASE_MS = 900
SCROLL_DELAY_STEP_MS = 200
MIN_SCROLL_DISTANCE_PX = 800

# Resource types aborted by the request filter
BLOCKED_RESOURCE_TYPES = frozenset(("image", "font", "stylesheet", "media"))

# =============================================================================
# Request Headers
# =============================================================================

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

# =============================================================================
# Summarization
# =============================================================================

DEFAULT_SUMMARIZER_URL = "https://text.pollinations.ai/"
DEFAULT_SUMMARIZER_MODEL = "openai"

MAX_DIGEST_CHARS = 4500

DIGEST_MAX_TABLES = 6
DIGEST_MAX_TABLE_ROWS = 6
DIGEST_MAX_LISTS = 10
DIGEST_MAX_LIST_ITEMS = 10

SUMMARY_RATE_LIMITED_MESSAGE = (
    "AI service is currently busy (rate limit). You can still view the "
    "scraped content and use chat later."
)
SUMMARY_UNAVAILABLE_MESSAGE = (
    "AI summary unavailable. You can still view the scraped content below."
)

# =============================================================================
# Service Metadata
# =============================================================================

SERVICE_NAME = "pagescope"
SERVICE_VERSION = "0.1.0"
