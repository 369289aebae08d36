"""
Base plugin interface for structured job extraction.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class PluginResult:
    """Result from plugin extraction"""
    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        confidence: float = 1.0,
        message: Optional[str] = None
    ):
        self.data = data
        self.confidence = confidence  # 0.0 to 1.0
        self.message = message

    @classmethod
    def no_match(cls, message: Optional[str] = None) -> 'PluginResult':
        return cls(data=None, confidence=0.0, message=message)

    def is_success(self) -> bool:
        """Check if extraction produced a titled record"""
        return bool(self.data and self.data.get('title'))

    def __repr__(self):
        return f"PluginResult(success={self.is_success()}, confidence={self.confidence:.2f})"


class ExtractionPlugin(ABC):
    """
    Base class for extraction plugins.

    A plugin turns a page it recognises into a job dict without calling the
    LLM. Each plugin should:
    1. Determine if it can handle a given URL/page
    2. Extract a single job posting from the page, or report no match

    Plugins must not raise for pages they do not recognise.
    """

    def __init__(self, name: str, priority: int = 50, authoritative: bool = True):
        """
        Initialize plugin.

        Args:
            name: Plugin name (e.g., 'schema_org', 'seek', 'page_title')
            priority: Priority (higher = tried first, default 50)
            authoritative: Whether a match is trusted enough to skip the LLM
        """
        self.name = name
        self.priority = priority
        self.authoritative = authoritative
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    def can_handle(self, url: Optional[str], soup: BeautifulSoup) -> bool:
        """
        Check if this plugin should look at the given page.

        Args:
            url: Source URL (may be None for pasted content)
            soup: Parsed page
        """
        pass

    @abstractmethod
    def extract(self, soup: BeautifulSoup, url: Optional[str]) -> PluginResult:
        """
        Extract a job posting from the page.

        Returns:
            PluginResult with a job dict, or PluginResult.no_match()
        """
        pass

    @staticmethod
    def hostname(url: Optional[str]) -> str:
        if not url:
            return ''
        return (urlparse(url).hostname or '').lower()

    @staticmethod
    def select_text(soup: BeautifulSoup, selectors: List[str]) -> Optional[str]:
        """Return the text of the first selector that matches non-empty text."""
        for selector in selectors:
            tag = soup.select_one(selector)
            if tag:
                text = ' '.join(tag.get_text(' ', strip=True).split())
                if text:
                    return text
        return None

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name}, priority={self.priority})>"


class DomainSelectorPlugin(ExtractionPlugin):
    """
    Plugin for a known job site, matched by hostname substring.

    Subclasses declare selector candidates; the first selector with text wins.
    """

    HOST_MARKER: str = ''
    DEFAULT_COMPANY: str = 'Unknown'
    TITLE_SELECTORS: List[str] = []
    COMPANY_SELECTORS: List[str] = []
    LOCATION_SELECTORS: List[str] = []
    JOB_TYPE_SELECTORS: List[str] = []
    DESCRIPTION_SELECTORS: List[str] = []

    def can_handle(self, url: Optional[str], soup: BeautifulSoup) -> bool:
        return bool(self.HOST_MARKER) and self.HOST_MARKER in self.hostname(url)

    def extract(self, soup: BeautifulSoup, url: Optional[str]) -> PluginResult:
        title = self.select_text(soup, self.TITLE_SELECTORS)
        if not title:
            return PluginResult.no_match(f"{self.name}: no title selector matched")

        data = {
            'title': title,
            'company': self.select_text(soup, self.COMPANY_SELECTORS) or self.DEFAULT_COMPANY,
            'location': self.select_text(soup, self.LOCATION_SELECTORS),
            'job_type': self.select_text(soup, self.JOB_TYPE_SELECTORS),
            'description': self.select_text(soup, self.DESCRIPTION_SELECTORS),
            'source': self.name,
        }
        return PluginResult(data=data, confidence=0.7)
