"""
Job import service.

Fans an import request ({url} | {urls} | {content}) out to the URL resolver
or the content parser, one asyncio task per item. Each item succeeds or
fails on its own; the aggregate reports per-item outcomes.

Persistence is owned by the caller's storage layer; this module only talks
to it through the JobRepository protocol.
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import BaseModel

from core.errors import ExtractionError, FetchError
from pipeline.extractor import JobContentParser
from pipeline.models import ParsedJobData
from pipeline.resolver import JobUrlResolver

logger = logging.getLogger(__name__)


class ImportRequest(BaseModel):
    url: Optional[str] = None
    urls: Optional[List[str]] = None
    content: Optional[str] = None
    save_immediately: bool = False

    def items(self) -> List[Tuple[str, str, Optional[str]]]:
        """
        Return (kind, value, page_url) triples in request order.

        Content sent together with `url` is one item: the URL is the page the
        content came from, not something to fetch.
        """
        items: List[Tuple[str, str, Optional[str]]] = []
        if self.url and not self.content:
            items.append(('url', self.url, self.url))
        for url in self.urls or []:
            items.append(('url', url, url))
        if self.content:
            items.append(('content', self.content, self.url))
        return items


class JobRepository(Protocol):
    """Storage collaborator for parsed jobs."""

    async def save(self, data: ParsedJobData, user_id: str) -> str:
        ...

    async def get_source_url(self, job_id: str, user_id: str) -> Optional[str]:
        ...

    async def update(self, job_id: str, user_id: str, data: ParsedJobData) -> Dict[str, Any]:
        ...


class InMemoryJobRepository:
    """Process-local JobRepository for development and tests."""

    def __init__(self):
        self._jobs: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def save(self, data: ParsedJobData, user_id: str) -> str:
        job_id = str(uuid.uuid4())
        record = data.to_dict()
        record.update({'id': job_id, 'user_id': user_id, 'source_url': data.application_url, 'status': 'saved'})
        async with self._lock:
            self._jobs[job_id] = record
        return job_id

    async def get_source_url(self, job_id: str, user_id: str) -> Optional[str]:
        record = self._jobs.get(job_id)
        if not record or record['user_id'] != user_id:
            return None
        return record.get('source_url')

    async def update(self, job_id: str, user_id: str, data: ParsedJobData) -> Dict[str, Any]:
        async with self._lock:
            record = self._jobs.get(job_id)
            if not record or record['user_id'] != user_id:
                raise LookupError(f"Job {job_id} not found")
            # source_url and status are owned by the stored record
            updates = data.to_dict()
            updates.pop('application_url', None)
            record.update(updates)
            return dict(record)


def describe_error(error: Exception) -> str:
    """Human-readable error naming the stage that failed."""
    if isinstance(error, FetchError):
        return f"fetch failed: {error}"
    if isinstance(error, ExtractionError):
        return f"extraction failed ({error.stage}): {error}"
    return f"import failed: {error}"


class JobImportService:
    """Batch import and rescrape on top of the extraction pipeline."""

    def __init__(
        self,
        parser: JobContentParser,
        resolver: JobUrlResolver,
        repository: Optional[JobRepository] = None
    ):
        self.parser = parser
        self.resolver = resolver
        self.repository = repository

    async def import_jobs(self, request: ImportRequest, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Import every item in the request.

        Raises:
            ValueError: when the request carries no url, urls or content
        """
        items = request.items()
        if not items:
            raise ValueError("Please provide a URL or job content")

        logger.info(f"[import] Importing {len(items)} item(s) (save_immediately={request.save_immediately})")

        results = await asyncio.gather(*(
            self._import_one(kind, value, page_url, request.save_immediately, user_id)
            for kind, value, page_url in items
        ))

        success_count = sum(1 for r in results if r['success'])
        fail_count = len(results) - success_count

        return {
            'success': success_count > 0,
            'results': list(results),
            'summary': f"Imported {success_count} jobs, failed {fail_count}.",
        }

    async def _import_one(
        self,
        kind: str,
        value: str,
        page_url: Optional[str],
        save: bool,
        user_id: Optional[str]
    ) -> Dict[str, Any]:
        label = value if kind == 'url' else f"content ({len(value)} chars)"
        if kind == 'content' and page_url:
            label = f"{page_url} {label}"
        result: Dict[str, Any] = {'input': label, 'success': False}

        try:
            if kind == 'url':
                data = await self.resolver.parse_job_from_url(value)
            else:
                data = await self.parser.parse_job_content(value, url=page_url)
                data = data.with_application_url(page_url)
            result['parsed_data'] = data.to_dict()

            if save:
                result['job_id'] = await self._save(data, user_id)

            result['success'] = True
        except (FetchError, ExtractionError, LookupError, ValueError) as e:
            logger.warning(f"[import] Failed to import {label[:120]}: {e}")
            result['error'] = describe_error(e)
            if isinstance(e, ExtractionError) and e.partial_data:
                result['parsed_data'] = e.partial_data
        except Exception as e:
            logger.error(f"[import] Unexpected error importing {label[:120]}: {e}", exc_info=True)
            result['error'] = describe_error(e)

        return result

    async def _save(self, data: ParsedJobData, user_id: Optional[str]) -> str:
        if self.repository is None:
            raise LookupError("Job storage is not configured")
        if not user_id:
            raise ValueError("A user id is required to save jobs")
        return await self.repository.save(data, user_id)

    async def rescrape_job(self, job_id: str, user_id: str) -> Dict[str, Any]:
        """
        Re-parse a stored job from its source URL and update it.

        Errors propagate to the caller.

        Raises:
            LookupError: job not found, or it has no source URL
            FetchError, ExtractionError: from the pipeline
        """
        if self.repository is None:
            raise LookupError("Job storage is not configured")

        source_url = await self.repository.get_source_url(job_id, user_id)
        if not source_url:
            raise LookupError(f"No source URL available for job {job_id}")

        data = await self.resolver.parse_job_from_url(source_url)
        return await self.repository.update(job_id, user_id, data)
