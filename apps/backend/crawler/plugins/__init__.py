"""
Extraction plugin system.

Plugins provide zero-cost structured extraction for known page shapes:
- Schema.org JobPosting JSON-LD
- Known job boards matched by hostname
- The page <title> as a last resort
"""

from .base import ExtractionPlugin, DomainSelectorPlugin, PluginResult
from .registry import PluginRegistry, default_registry, resolve_page_url

__all__ = [
    'ExtractionPlugin',
    'DomainSelectorPlugin',
    'PluginResult',
    'PluginRegistry',
    'default_registry',
    'resolve_page_url'
]
