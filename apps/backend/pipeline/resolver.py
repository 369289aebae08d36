"""
URL resolver: obtain a job page by the cheapest viable means and parse it.

With a scrape worker configured, the worker does fetch + parse itself and
returns ParsedJobData JSON. Without one, the page is fetched locally and
handed to the content parser. A failed delegation is surfaced rather than
silently retried locally unless allow_local_fallback is set.
"""

import json
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from core.errors import ExtractionError, FetchError
from core.net import HTTPClient
from crawler.html_fetch import decode_body, fetch_job_page
from .extractor import JobContentParser
from .models import ParsedJobData, sanitize_job_data

logger = logging.getLogger(__name__)

# Worker JSON embeds the full rendered page as original_content
WORKER_MAX_SIZE_KB = 65536


def validate_url(url: str) -> str:
    parsed = urlparse((url or '').strip())
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise FetchError(f"Invalid URL: {url!r}", url=url)
    return url.strip()


class JobUrlResolver:
    """Resolves a job URL into ParsedJobData."""

    def __init__(
        self,
        parser: JobContentParser,
        http_client: Optional[HTTPClient] = None,
        scraper_url: Optional[str] = None,
        allow_local_fallback: bool = False,
        language: Optional[str] = None,
        worker_max_size_kb: int = WORKER_MAX_SIZE_KB
    ):
        self.parser = parser
        self.http_client = http_client or HTTPClient()
        self.scraper_url = scraper_url
        self.allow_local_fallback = allow_local_fallback
        self.language = language
        self.worker_max_size_kb = worker_max_size_kb

    async def parse_job_from_url(self, url: str, scraper_url: Optional[str] = None) -> ParsedJobData:
        """
        Fetch and parse a job posting.

        Args:
            url: Job posting URL
            scraper_url: Scrape worker endpoint; overrides the configured one

        Raises:
            FetchError: retrieval failed (locally or via the worker)
            ExtractionError: content was retrieved but no viable record came out
        """
        url = validate_url(url)
        worker_url = scraper_url or self.scraper_url

        if worker_url:
            logger.info(f"[resolver] Delegating {url} to scrape worker {worker_url}")
            try:
                data = await self._delegate(worker_url, url)
            except FetchError as e:
                if not self.allow_local_fallback:
                    raise
                logger.warning(f"[resolver] Worker delegation failed, falling back to local fetch: {e}")
            else:
                return data.with_application_url(url)

        logger.info(f"[resolver] Fetching job page locally: {url}")
        html = await fetch_job_page(url, self.http_client)
        data = await self.parser.parse_job_content(html, url=url, language=self.language)
        return data.with_application_url(url)

    async def _delegate(self, worker_url: str, url: str) -> ParsedJobData:
        params = {'url': url}
        if self.language:
            params['language'] = self.language

        try:
            status, headers, body = await self.http_client.fetch(
                worker_url,
                params=params,
                headers={'Accept': 'application/json'},
                max_size_kb=self.worker_max_size_kb
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Scrape worker unreachable: {e}", url=url) from e

        if len(body) >= self.worker_max_size_kb * 1024:
            raise FetchError(
                f"Worker response too large (limit {self.worker_max_size_kb}KB)", url=url, status_code=status
            )

        text = decode_body(body, headers)
        if not 200 <= status < 300:
            raise FetchError(f"Worker returned {status}: {text[:500]}", url=url, status_code=status)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise FetchError(f"Malformed worker response: {e}", url=url, status_code=status) from e
        if not isinstance(payload, dict):
            raise FetchError("Malformed worker response: expected a JSON object", url=url, status_code=status)

        data = sanitize_job_data(payload)
        if not data.is_viable():
            raise ExtractionError(
                "Scrape worker returned a record without title or company",
                stage="worker_validation",
                partial_data=data.to_dict()
            )

        logger.info(f"[resolver] Worker parsed job: {data.title} @ {data.company}")
        return data


async def parse_job_from_url(
    url: str,
    parser: JobContentParser,
    scraper_url: Optional[str] = None,
    http_client: Optional[HTTPClient] = None
) -> ParsedJobData:
    """Convenience wrapper around JobUrlResolver."""
    resolver = JobUrlResolver(parser, http_client=http_client)
    return await resolver.parse_job_from_url(url, scraper_url=scraper_url)
