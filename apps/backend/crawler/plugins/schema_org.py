"""
Schema.org JobPosting plugin.

Reads <script type="application/ld+json"> blocks and maps the first
JobPosting found (directly, in a top-level array, or inside @graph).
"""
import json
import logging
from typing import Any, Dict, List, Optional
from bs4 import BeautifulSoup

from .base import ExtractionPlugin, PluginResult

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = 'Unknown Company'


class SchemaOrgPlugin(ExtractionPlugin):
    """Extracts job data from JSON-LD structured data."""

    def __init__(self):
        super().__init__(name="schema_org", priority=100)

    def can_handle(self, url: Optional[str], soup: BeautifulSoup) -> bool:
        return soup.find('script', type='application/ld+json') is not None

    def extract(self, soup: BeautifulSoup, url: Optional[str]) -> PluginResult:
        job = self.find_job_posting(soup)
        if job is None:
            return PluginResult.no_match("No JobPosting in JSON-LD")

        return PluginResult(data=self._map_job_posting(job), confidence=0.9)

    def find_job_posting(self, soup: BeautifulSoup) -> Optional[Dict]:
        """Return the first JobPosting object across all JSON-LD blocks."""
        for script in soup.find_all('script', type='application/ld+json'):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                self.logger.debug(f"[plugins] Skipping malformed JSON-LD block: {e}")
                continue

            for item in self._candidates(data):
                if self._is_job_posting(item):
                    return item
        return None

    def _candidates(self, data: Any) -> List[Dict]:
        """Direct object first, then its @graph entries."""
        roots = data if isinstance(data, list) else [data]
        items = []
        for root in roots:
            if not isinstance(root, dict):
                continue
            items.append(root)
            graph = root.get('@graph')
            if isinstance(graph, list):
                items.extend(item for item in graph if isinstance(item, dict))
        return items

    def _is_job_posting(self, item: Dict) -> bool:
        item_type = item.get('@type', '')
        if isinstance(item_type, list):
            return 'JobPosting' in item_type
        return item_type == 'JobPosting'

    def _map_job_posting(self, job: Dict) -> Dict[str, Any]:
        salary_min, salary_max, currency = self._salary(job.get('baseSalary'))
        return {
            'title': job.get('title') or job.get('name'),
            'company': self._organization_name(job.get('hiringOrganization')) or DEFAULT_COMPANY,
            'description': self._description(job.get('description')),
            'location': self._location(job.get('jobLocation')),
            'job_type': job.get('employmentType'),
            'posted_date': job.get('datePosted'),
            'deadline': job.get('validThrough'),
            'salary_min': salary_min,
            'salary_max': salary_max,
            'salary_currency': currency or job.get('salaryCurrency'),
            'application_url': job.get('url'),
            'source': self.name,
        }

    @staticmethod
    def _organization_name(org: Any) -> Optional[str]:
        if isinstance(org, dict):
            return org.get('name') or org.get('legalName')
        if isinstance(org, str):
            return org
        return None

    @staticmethod
    def _description(value: Any) -> Optional[str]:
        if not value:
            return None
        text = str(value)
        if '<' in text and '>' in text:
            # JSON-LD descriptions are frequently HTML fragments
            text = BeautifulSoup(text, 'lxml').get_text('\n', strip=True)
        return text

    @staticmethod
    def _location(value: Any) -> Optional[str]:
        locations = value if isinstance(value, list) else [value]
        for loc in locations:
            if isinstance(loc, str) and loc.strip():
                return loc.strip()
            if not isinstance(loc, dict):
                continue
            addr = loc.get('address')
            if isinstance(addr, str) and addr.strip():
                return addr.strip()
            if isinstance(addr, dict):
                parts = [
                    addr.get(key) for key in ('addressLocality', 'addressRegion', 'addressCountry')
                    if isinstance(addr.get(key), str) and addr.get(key).strip()
                ]
                if parts:
                    return ', '.join(parts)
            if loc.get('name'):
                return str(loc['name'])
        return None

    @staticmethod
    def _salary(value: Any):
        """Returns (min, max, currency) from a MonetaryAmount."""
        if not isinstance(value, dict):
            return None, None, None
        currency = value.get('currency')
        amount = value.get('value')
        if isinstance(amount, dict):
            single = amount.get('value')
            return amount.get('minValue', single), amount.get('maxValue', single), currency
        return amount, amount, currency
