"""
HTTP client for page fetches and scrape-worker delegation.

Sends browser-like headers, follows redirects, bounds response size and logs
every request. Failures are not retried here; callers own retry policy.
"""
import os
import time
import logging
from typing import Optional, Dict, Tuple, Any
import httpx

logger = logging.getLogger(__name__)

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_SIZE_KB = 4096


class HTTPClient:
    """Async HTTP client with realistic headers and size limits"""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            user_agent: User-Agent header (defaults to JOBPARSE_CRAWLER_UA or a desktop Chrome UA)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.user_agent = user_agent or os.getenv("JOBPARSE_CRAWLER_UA", DEFAULT_UA)
        self.timeout = httpx.Timeout(timeout)
        self.transport = transport

    def _get_headers(self, custom_headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Build request headers"""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        if custom_headers:
            headers.update(custom_headers)
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport
        )

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        max_size_kb: int = DEFAULT_MAX_SIZE_KB
    ) -> Tuple[int, Dict[str, str], bytes]:
        """
        Fetch URL.

        Args:
            url: URL to fetch
            method: HTTP method (GET or POST)
            headers: Custom headers to add
            params: Query parameters
            json_data: JSON body for POST
            max_size_kb: Maximum response size in KB; larger bodies are truncated

        Returns:
            (status_code, headers, body)

        Raises:
            httpx.HTTPError: on transport failures (DNS, timeout, connection reset)
        """
        request_headers = self._get_headers(headers)

        async with self._client() as client:
            start_time = time.time()

            try:
                if method.upper() == "GET":
                    response = await client.get(url, headers=request_headers, params=params)
                elif method.upper() == "POST":
                    response = await client.post(url, headers=request_headers, params=params, json=json_data)
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")
            except httpx.TimeoutException as e:
                logger.error(f"[net] Timeout fetching {url}: {e}")
                raise
            except httpx.HTTPError as e:
                logger.error(f"[net] Error fetching {url}: {e}")
                raise

            elapsed_ms = int((time.time() - start_time) * 1000)
            content_length = len(response.content)
            body = response.content
            if content_length > max_size_kb * 1024:
                logger.warning(f"[net] Content too large: {content_length} bytes (limit: {max_size_kb}KB) - {url}")
                body = body[:max_size_kb * 1024]

            logger.info(f"[net] {method.upper()} {response.status_code} {url} ({content_length} bytes, {elapsed_ms}ms)")

            return response.status_code, dict(response.headers), body
