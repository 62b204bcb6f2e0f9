"""Single-shot HTML fetcher used by the CLI and :func:`~tripleparser.pipeline.extract_urls`.

One GET per URL with the stdlib ``urllib`` client.  No retries, proxies or
caching: a failure is reported as :class:`~tripleparser.errors.FetchError`
and ends up in that URL's extraction record.
"""

from __future__ import annotations

import gzip
import http.client
import logging
import urllib.error
import urllib.request
import zlib
from email.message import Message
from urllib.parse import urlparse

from tripleparser import settings
from tripleparser.errors import FetchError

logger = logging.getLogger(__name__)


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _decode_body(raw: bytes, headers: Message | None, url: str) -> str:
    encoding = ""
    if headers is not None:
        encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()

    try:
        if encoding == "gzip":
            raw = gzip.decompress(raw)
        elif encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc

    charset = "utf-8"
    if headers is not None:
        charset = headers.get_content_charset("utf-8") or "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def fetch_html(
    url: str,
    *,
    timeout: float = settings.FETCH_TIMEOUT,
    user_agent: str | None = None,
) -> str:
    """Fetch *url* and return the response body as a decoded string.

    Raises:
        FetchError: On invalid URLs, HTTP errors or connection failures.
    """
    if not is_valid_url(url):
        raise FetchError(f"Invalid URL: {url!r}", url=url)

    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or settings.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
        },
    )
    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return _decode_body(resp.read(), resp.headers, url)
    except urllib.error.HTTPError as exc:
        raise FetchError(
            f"Failed to fetch URL ({exc.code} {exc.reason})", url=url, status=exc.code,
        ) from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"Failed to fetch URL: {exc.reason}", url=url) from exc
    except OSError as exc:
        raise FetchError(f"Failed to fetch URL: {exc}", url=url) from exc
    except (http.client.HTTPException, ValueError) as exc:
        # malformed URL text, IDNA failures, truncated bodies
        raise FetchError(f"Failed to fetch URL: {exc}", url=url) from exc
