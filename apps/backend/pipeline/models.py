"""
Canonical job record produced by the extraction pipeline.
"""
import logging
import re
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

JobType = Literal['full-time', 'part-time', 'contract', 'internship', 'casual']

VALID_JOB_TYPES = ('full-time', 'part-time', 'contract', 'internship', 'casual')

# Aliases seen in schema.org employmentType values and model output
JOB_TYPE_ALIASES = {
    'fulltime': 'full-time',
    'full-time': 'full-time',
    'permanent': 'full-time',
    'parttime': 'part-time',
    'part-time': 'part-time',
    'contract': 'contract',
    'contractor': 'contract',
    'temporary': 'contract',
    'fixed-term': 'contract',
    'intern': 'internship',
    'internship': 'internship',
    'casual': 'casual',
    'casual/vacation': 'casual',
}

DEFAULT_CURRENCY = 'NZD'
CURRENCY_RE = re.compile(r'^[A-Z]{3}$')
NUMBER_RE = re.compile(r'-?\d+(?:\.\d+)?')
ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

TEXT_FIELDS = (
    'title', 'company', 'location', 'description', 'requirements', 'benefits',
    'original_content', 'application_url', 'experience_years',
    'education_requirement', 'company_info', 'source',
)


class ParsedJobData(BaseModel):
    """Structured job posting. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    original_content: Optional[str] = None
    posted_date: Optional[str] = None
    deadline: Optional[str] = None
    application_url: Optional[str] = None
    skills_required: Optional[List[str]] = None
    experience_years: Optional[str] = None
    education_requirement: Optional[str] = None
    company_info: Optional[str] = None
    source: Optional[str] = None

    def is_viable(self) -> bool:
        """A record needs both a title and a company to be usable."""
        return bool(self.title and self.title.strip() and self.company and self.company.strip())

    def with_application_url(self, url: Optional[str]) -> 'ParsedJobData':
        """Return a copy carrying url as application_url unless one is already set."""
        if self.application_url or not url:
            return self
        return self.model_copy(update={'application_url': url})

    def with_original_content(self, content: Optional[str]) -> 'ParsedJobData':
        return self.model_copy(update={'original_content': content})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if v is not None and str(v).strip()]
        value = '\n'.join(parts)
    text = str(value).strip()
    return text or None


def coerce_salary(value: Any) -> Optional[float]:
    """
    Turn a salary value into a positive number.

    Accepts numbers and numeric-looking strings such as "$80,000" or "120k".
    Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().lower().replace(',', '')
        match = NUMBER_RE.search(text)
        if not match:
            return None
        number = float(match.group(0))
        if text[match.end():match.end() + 1] == 'k':
            number *= 1000
    return number if number > 0 else None


def normalize_job_type(value: Any) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, (list, tuple)):
        for item in value:
            normalized = normalize_job_type(item)
            if normalized:
                return normalized
        return None
    key = re.sub(r'[\s_]+', '-', str(value).strip().lower())
    mapped = JOB_TYPE_ALIASES.get(key) or JOB_TYPE_ALIASES.get(key.replace('-', ''))
    return mapped if mapped in VALID_JOB_TYPES else None


def normalize_currency(value: Any, has_salary: bool) -> Optional[str]:
    code = str(value).strip().upper() if value else ''
    if CURRENCY_RE.match(code):
        return code
    return DEFAULT_CURRENCY if has_salary else None


def format_date(value: Any) -> Optional[str]:
    """Normalize a date to YYYY-MM-DD, or None if it cannot be parsed."""
    if not value:
        return None
    text = str(value).strip()
    if ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            logger.debug(f"[models] Impossible date: {text}")
            return None
    try:
        return date_parser.parse(text).strftime('%Y-%m-%d')
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"[models] Unparseable date: {text[:50]}")
        return None


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, (list, tuple)):
        return None
    items = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return items or None


def sanitize_job_data(data: Dict[str, Any]) -> ParsedJobData:
    """
    Normalize a loosely-typed dict (plugin or model output) into ParsedJobData.

    Missing or malformed optional fields become None; this never raises for
    bad field values.
    """
    if not isinstance(data, dict):
        data = {}

    cleaned: Dict[str, Any] = {name: _clean_text(data.get(name)) for name in TEXT_FIELDS}

    salary_min = coerce_salary(data.get('salary_min'))
    salary_max = coerce_salary(data.get('salary_max'))
    if salary_min and salary_max and salary_min > salary_max:
        salary_min, salary_max = salary_max, salary_min
    has_salary = salary_min is not None or salary_max is not None

    cleaned.update({
        'job_type': normalize_job_type(data.get('job_type')),
        'salary_min': salary_min,
        'salary_max': salary_max,
        'salary_currency': normalize_currency(data.get('salary_currency'), has_salary),
        'posted_date': format_date(data.get('posted_date')),
        'deadline': format_date(data.get('deadline')),
        'skills_required': _string_list(data.get('skills_required')),
    })

    return ParsedJobData(**cleaned)
