"""
Content parser: raw page HTML or pasted text -> ParsedJobData.

Implements a staged pipeline with short-circuit on the first viable record:
1. Site plugins (schema.org JSON-LD, known job boards, page title)
2. LLM extraction with JSON repair (only when no authoritative plugin matched)
3. Validation of the title + company predicate
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from bs4 import BeautifulSoup

from core.errors import ExtractionError, JsonParseError
from core.json_utils import parse_json_from_ai
from crawler.plugins import PluginRegistry, default_registry
from .ai_fallback import LLMClient, LLMError, build_job_prompt, DEFAULT_TEMPERATURE, DEFAULT_MAX_TOKENS
from .models import ParsedJobData, sanitize_job_data

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_CHARS = 15000
TRUNCATION_MARKER = '...[content truncated]'
STRIP_TAGS = ['script', 'style', 'noscript', 'template', 'svg']


# Outcomes of a single extraction attempt (internal)

@dataclass(frozen=True)
class AdapterMatch:
    data: ParsedJobData
    plugin: str
    authoritative: bool


@dataclass(frozen=True)
class LlmSuccess:
    data: ParsedJobData


@dataclass(frozen=True)
class LlmMalformed:
    raw_text: str
    error: JsonParseError


@dataclass(frozen=True)
class Failure:
    reason: str
    stage: str


Outcome = Union[AdapterMatch, LlmSuccess, LlmMalformed, Failure]


def html_to_text(content: str) -> str:
    """Strip markup, scripts and styles; collapse whitespace."""
    if '<' not in content:
        return ' '.join(content.split())
    soup = BeautifulSoup(content, 'lxml')
    for tag in soup(STRIP_TAGS):
        tag.decompose()
    return ' '.join(soup.get_text(' ').split())


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


class JobContentParser:
    """Turns fetched content into a validated ParsedJobData."""

    def __init__(
        self,
        llm_client: Optional[LLMClient],
        registry: Optional[PluginRegistry] = None,
        default_language: str = 'zh',
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS
    ):
        self.llm_client = llm_client
        self.registry = registry or default_registry()
        self.default_language = default_language
        self.max_content_chars = max_content_chars

    async def parse_job_content(
        self,
        content: str,
        url: Optional[str] = None,
        language: Optional[str] = None
    ) -> ParsedJobData:
        """
        Extract a job posting from content.

        Args:
            content: Raw HTML or plain text
            url: Source URL if known (used for site plugin selection)
            language: Output language hint for the LLM ('zh' or 'en')

        Returns:
            ParsedJobData with title and company set

        Raises:
            ExtractionError: when no stage produces a viable record
        """
        if not content or not content.strip():
            raise ExtractionError("No content to parse", stage="input")

        logger.info(f"[extractor] Parsing {len(content)} chars{f' from {url}' if url else ''}")

        # Stage 1: plugins
        adapter = self._run_plugins(content, url)
        if isinstance(adapter, AdapterMatch) and adapter.authoritative and adapter.data.is_viable():
            logger.info(f"[extractor] Using {adapter.plugin} match, skipping LLM")
            return adapter.data.with_original_content(content)

        fallback_data = adapter.data.to_dict() if isinstance(adapter, AdapterMatch) else None

        # Stage 2: LLM
        outcome = await self._run_llm(content, language or self.default_language)

        if isinstance(outcome, LlmSuccess):
            if not outcome.data.is_viable():
                raise ExtractionError(
                    "Could not extract job title or company name",
                    stage="validation",
                    partial_data=outcome.data.to_dict()
                )
            return outcome.data.with_original_content(content)

        if isinstance(outcome, LlmMalformed):
            logger.error(f"[extractor] Model output was not valid JSON. Preview: {outcome.raw_text[:500]}")
            raise ExtractionError(
                f"AI returned invalid JSON: {outcome.error.parser_error}",
                stage="llm_json",
                partial_data=fallback_data
            ) from outcome.error

        raise ExtractionError(outcome.reason, stage=outcome.stage, partial_data=fallback_data)

    def _run_plugins(self, content: str, url: Optional[str]) -> Outcome:
        match = self.registry.run(content, url)
        if match is None:
            return Failure(reason="No plugin matched", stage="plugins")
        plugin, result = match
        return AdapterMatch(
            data=sanitize_job_data(result.data),
            plugin=plugin.name,
            authoritative=plugin.authoritative
        )

    async def _run_llm(self, content: str, language: str) -> Outcome:
        if self.llm_client is None or not self.llm_client.enabled:
            return Failure(reason="No structured data found and LLM is not configured", stage="llm_unavailable")

        text = truncate(html_to_text(content), self.max_content_chars)
        messages = build_job_prompt(text, language)

        try:
            response_text = await self.llm_client.complete(
                messages,
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=DEFAULT_MAX_TOKENS
            )
        except LLMError as e:
            logger.error(f"[extractor] LLM call failed: {e}")
            return Failure(reason=str(e), stage="llm_call")

        try:
            parsed: Any = parse_json_from_ai(response_text)
        except JsonParseError as e:
            return LlmMalformed(raw_text=response_text, error=e)

        if not isinstance(parsed, dict):
            return Failure(reason=f"AI returned {type(parsed).__name__} instead of an object", stage="llm_json")

        data = sanitize_job_data(parsed)
        return LlmSuccess(data=data.model_copy(update={'source': 'llm'}))


async def parse_job_content(
    content: str,
    llm_client: Optional[LLMClient],
    url: Optional[str] = None,
    language: Optional[str] = None,
    registry: Optional[PluginRegistry] = None
) -> ParsedJobData:
    """Convenience wrapper around JobContentParser."""
    parser = JobContentParser(llm_client, registry=registry)
    return await parser.parse_job_content(content, url=url, language=language)
