"""
Shared fixtures: fake LLM client and sample job pages.
"""
import json
from typing import Dict, List, Optional

import pytest

from pipeline.ai_fallback import LLMError


class FakeLLMClient:
    """Records calls and returns a canned completion."""

    def __init__(self, response: str = "", enabled: bool = True, error: Optional[Exception] = None):
        self.response = response
        self._enabled = enabled
        self.error = error
        self.calls: List[Dict] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def complete(self, messages, temperature=0.1, max_tokens=4000) -> str:
        self.calls.append({'messages': messages, 'temperature': temperature, 'max_tokens': max_tokens})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def fake_llm():
    """Factory for FakeLLMClient instances."""
    def _make(response=None, **kwargs):
        if isinstance(response, dict):
            response = json.dumps(response)
        return FakeLLMClient(response or "", **kwargs)
    return _make


@pytest.fixture
def failing_llm():
    return FakeLLMClient(error=LLMError("LLM returned 503: upstream unavailable"))


@pytest.fixture
def llm_job_payload():
    return {
        "title": "Backend Developer",
        "company": "Kiwi Software Ltd",
        "location": "Wellington",
        "job_type": "full-time",
        "salary_min": "90,000",
        "salary_max": 120000,
        "description": "Build APIs",
        "requirements": "3+ years Python",
        "skills_required": ["Python", "PostgreSQL", ""],
    }


@pytest.fixture
def schema_org_html():
    """Job page with a schema.org JobPosting block."""
    return """
    <html>
    <head>
        <title>Senior Engineer | Acme Careers</title>
        <script type="application/ld+json">
        {
            "@context": "https://schema.org",
            "@type": "JobPosting",
            "title": "Senior Engineer",
            "description": "<p>Design and build <b>distributed</b> systems.</p>",
            "datePosted": "2025-01-10",
            "validThrough": "2025-02-28T23:59:59Z",
            "employmentType": "FULL_TIME",
            "hiringOrganization": {"@type": "Organization", "name": "Acme Co"},
            "jobLocation": {
                "@type": "Place",
                "address": {"addressLocality": "Auckland", "addressCountry": "NZ"}
            },
            "baseSalary": {
                "@type": "MonetaryAmount",
                "currency": "NZD",
                "value": {"@type": "QuantitativeValue", "minValue": 140000, "maxValue": 170000}
            }
        }
        </script>
    </head>
    <body><h1>Senior Engineer</h1></body>
    </html>
    """


@pytest.fixture
def plain_html():
    """Job page with no structured data and no known host."""
    return """
    <html>
    <head><title>Careers - Backend Developer</title><style>body {color: red}</style></head>
    <body>
        <script>window.tracking = true;</script>
        <h1>Backend Developer</h1>
        <p>Kiwi Software Ltd is hiring in Wellington.</p>
        <p>Salary: $90,000 - $120,000</p>
    </body>
    </html>
    """
