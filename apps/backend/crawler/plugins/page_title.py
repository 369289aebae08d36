"""
Page title plugin - the adapter of last resort.

Always matches when the page has a <title>, but with company "Unknown" and
low confidence. It is not authoritative: the content parser still asks the
LLM when this is the only match.
"""
from typing import Optional
from bs4 import BeautifulSoup

from .base import ExtractionPlugin, PluginResult

UNKNOWN_COMPANY = 'Unknown'


class PageTitlePlugin(ExtractionPlugin):
    """Fallback plugin using the document title"""

    def __init__(self):
        super().__init__(name="page_title", priority=0, authoritative=False)

    def can_handle(self, url: Optional[str], soup: BeautifulSoup) -> bool:
        return True

    def extract(self, soup: BeautifulSoup, url: Optional[str]) -> PluginResult:
        title = soup.title.get_text(strip=True) if soup.title else None
        return PluginResult(
            data={'title': title or None, 'company': UNKNOWN_COMPANY, 'source': self.name},
            confidence=0.1,
            message="Page title fallback"
        )
