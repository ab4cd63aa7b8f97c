"""
HTTP fetching for post pages and avatar images.
"""
from typing import Dict, Optional

import httpx

from .exceptions import TransportError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Desktop browser user agent; the target platforms serve stripped pages to bots
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,*/*;q=0.9",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}

DEFAULT_TIMEOUT = 15.0


async def _get(url: str, headers: Optional[Dict[str, str]], timeout: float) -> httpx.Response:
    merged = {**DEFAULT_HEADERS, **(headers or {})}
    try:
        async with httpx.AsyncClient(headers=merged, follow_redirects=True, timeout=timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            await response.aread()
            return response
    except (httpx.HTTPStatusError, httpx.RequestError, httpx.InvalidURL) as e:
        logger.warning(
            f"Fetch failed for {url}: {e}",
            extra={"subsys": "web", "event": "fetch_failed"},
        )
        raise TransportError(f"GET {url} failed: {e}") from e


async def fetch_html(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """
    Fetch a page with browser-like headers and return its markup.

    Args:
        url: Page to fetch
        headers: Extra headers merged over the browser defaults (e.g. Referer)
        timeout: Total request timeout in seconds

    Raises:
        TransportError: on any network failure or non-2xx status
    """
    response = await _get(url, headers, timeout)
    logger.debug(f"Fetched {url} ({len(response.content)} bytes)", extra={"subsys": "web"})
    return response.text


async def fetch_bytes(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch a binary resource (avatar image). Raises TransportError on failure."""
    response = await _get(url, None, timeout)
    return response.content
