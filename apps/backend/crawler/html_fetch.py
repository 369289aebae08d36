"""
Local HTML fetch for a single job page.
"""
import logging
import re
from typing import Dict, Optional

import httpx

from core.errors import FetchError
from core.net import HTTPClient

logger = logging.getLogger(__name__)

CHARSET_RE = re.compile(r'charset=([\w-]+)', re.IGNORECASE)


def decode_body(body: bytes, headers: Dict[str, str]) -> str:
    """Decode a response body using the declared charset, falling back to UTF-8."""
    content_type = headers.get('content-type') or headers.get('Content-Type') or ''
    match = CHARSET_RE.search(content_type)
    encoding = match.group(1) if match else 'utf-8'
    try:
        return body.decode(encoding, errors='replace')
    except LookupError:
        return body.decode('utf-8', errors='replace')


async def fetch_job_page(url: str, http_client: Optional[HTTPClient] = None) -> str:
    """
    Fetch a job page directly.

    Returns:
        Page HTML

    Raises:
        FetchError: on transport errors, non-2xx responses or empty bodies
    """
    client = http_client or HTTPClient()

    try:
        status, headers, body = await client.fetch(url)
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch URL: {e}", url=url) from e

    if not 200 <= status < 300:
        raise FetchError(f"Failed to fetch URL: {status}", url=url, status_code=status)

    html = decode_body(body, headers)
    if not html.strip():
        raise FetchError("Fetched page is empty", url=url, status_code=status)

    logger.info(f"[html_fetch] Fetched {len(html)} characters from {url}")
    return html
