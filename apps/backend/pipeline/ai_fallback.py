"""
AI fallback extractor.

Calls an OpenAI-compatible chat completions endpoint (OpenRouter by default)
with a fixed job-extraction prompt. The client is constructed once per
process and passed into the content parser.
"""

import logging
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-3-haiku"
DEFAULT_TEMPERATURE = 0.1  # Low temperature for deterministic output
DEFAULT_MAX_TOKENS = 4000

SYSTEM_PROMPT = "You are a job posting extraction assistant. Return only a single valid JSON object."

LANGUAGE_HINTS = {
    'zh': "Write description, requirements, benefits and company_info in Simplified Chinese. "
          "Keep title, company and location in their original language.",
    'en': "Write description, requirements, benefits and company_info in English.",
}

JOB_PROMPT_TEMPLATE = """Extract the job posting below into structured data.

Rules:
1. Extract title, company and location exactly as written.
2. Map job_type to one of: full-time, part-time, contract, internship, casual.
3. Salaries are numbers without currency symbols or thousands separators.
   Detect the currency (NZD, AUD, USD, CNY, EUR, GBP, ...). If the salary is
   hourly, weekly or monthly, convert it to an annual figure.
4. Dates use YYYY-MM-DD.
5. Use null for anything the posting does not state.
6. {language_hint}

Job posting:
{content}

Return strict JSON only, with no markdown code fences, in exactly this shape:
{{
  "title": "string",
  "company": "string",
  "location": "string or null",
  "job_type": "full-time|part-time|contract|internship|casual or null",
  "salary_min": 80000,
  "salary_max": 120000,
  "salary_currency": "NZD",
  "description": "responsibilities and duties",
  "requirements": "skills, experience, education",
  "benefits": "string or null",
  "posted_date": "YYYY-MM-DD or null",
  "deadline": "YYYY-MM-DD or null",
  "skills_required": ["skill"],
  "experience_years": "string or null",
  "education_requirement": "string or null",
  "company_info": "string or null",
  "application_url": "string or null"
}}"""


class LLMError(Exception):
    """Raised when the completion endpoint cannot be reached or errors."""
    pass


def build_job_prompt(content: str, language: str = 'zh') -> List[Dict[str, str]]:
    """Build the system/user message pair for job extraction."""
    hint = LANGUAGE_HINTS.get((language or '').lower(), LANGUAGE_HINTS['en'])
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": JOB_PROMPT_TEMPLATE.format(language_hint=hint, content=content)},
    ]


class LLMClient:
    """Thin async client for chat completions."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.transport = transport

        if not self.enabled:
            logger.warning("[ai_fallback] LLM API key not configured. AI extraction disabled.")

    @classmethod
    def from_settings(cls, settings) -> 'LLMClient':
        return cls(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            timeout=settings.llm_timeout_seconds
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS
    ) -> str:
        """
        Run a chat completion and return the message text.

        Raises:
            LLMError: on transport errors, non-2xx responses or unexpected payloads
        """
        if not self.enabled:
            raise LLMError("LLM API key is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens
        }

        logger.info(f"[ai_fallback] Calling {self.model} ({sum(len(m['content']) for m in messages)} prompt chars)")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        if response.status_code >= 400:
            raise LLMError(f"LLM returned {response.status_code}: {response.text[:200]}")

        try:
            data = response.json()
            content = data['choices'][0]['message'].get('content') or ''
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise LLMError(f"Unexpected LLM response shape: {e}") from e

        logger.info(f"[ai_fallback] Response length: {len(content)}")
        return content
