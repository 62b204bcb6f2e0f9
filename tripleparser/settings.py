"""Default settings for tripleparser.

Every value here can be overridden by a YAML config file, environment
variables or explicit keyword arguments (see :mod:`tripleparser.config`).
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Model provider (OpenAI-compatible chat completions)
# ---------------------------------------------------------------------------
API_URL = "https://api.openai.com/v1/chat/completions"
MODEL = "gpt-4"
TEMPERATURE = 0.3
MAX_TOKENS = 1000
REQUEST_TIMEOUT = 60  # seconds

# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------
DEFAULT_LANGUAGE = "en"

# mainContent is cut to this many characters before it goes into the prompt
CONTENT_CHAR_LIMIT = 1500

# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------
MAX_WORKERS = 4

# ---------------------------------------------------------------------------
# Fetcher (CLI / extract_urls only)
# ---------------------------------------------------------------------------
FETCH_TIMEOUT = 30  # seconds
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
OUTPUT_DIR = "./out"
RESULTS_FILENAME = "extracted-data.json"
OUTLINE_FILENAME = "outline.md"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(message)s"
