"""
Plugin registry for managing extraction plugins.
"""
import logging
from typing import List, Dict, Optional, Tuple
from bs4 import BeautifulSoup

from .base import ExtractionPlugin, PluginResult

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Ordered set of extraction plugins, highest priority first"""

    def __init__(self):
        self._plugins: List[ExtractionPlugin] = []
        self._plugins_by_name: Dict[str, ExtractionPlugin] = {}

    def register(self, plugin: ExtractionPlugin):
        """Register a plugin"""
        if plugin.name in self._plugins_by_name:
            logger.warning(f"[plugins] Plugin {plugin.name} already registered, replacing")
            self._plugins = [p for p in self._plugins if p.name != plugin.name]

        self._plugins_by_name[plugin.name] = plugin
        self._plugins.append(plugin)

        # Stable sort keeps registration order among equal priorities
        self._plugins.sort(key=lambda p: p.priority, reverse=True)

        logger.debug(f"[plugins] Registered plugin: {plugin.name} (priority={plugin.priority})")

    def get_plugin(self, name: str) -> Optional[ExtractionPlugin]:
        """Get plugin by name"""
        return self._plugins_by_name.get(name)

    @property
    def plugins(self) -> List[ExtractionPlugin]:
        return list(self._plugins)

    def run(
        self,
        html: str,
        url: Optional[str] = None
    ) -> Optional[Tuple[ExtractionPlugin, PluginResult]]:
        """
        Try plugins in priority order and return the first that matches.

        Args:
            html: Page HTML (or plain text)
            url: Source URL, used for hostname matching. When absent the
                 page's canonical / og:url link is used.

        Returns:
            (plugin, result) for the first successful plugin, or None
        """
        soup = BeautifulSoup(html, 'lxml')
        page_url = url or resolve_page_url(soup)

        for plugin in self._plugins:
            try:
                if not plugin.can_handle(page_url, soup):
                    continue
                result = plugin.extract(soup, page_url)
            except Exception as e:
                logger.warning(f"[plugins] Plugin {plugin.name} failed, treating as no match: {e}", exc_info=True)
                continue

            if result.is_success():
                logger.info(f"[plugins] Plugin {plugin.name} matched (confidence={result.confidence:.2f})")
                return plugin, result
            logger.debug(f"[plugins] Plugin {plugin.name} did not match: {result.message}")

        return None

    def list_plugins(self) -> List[Dict]:
        """List all registered plugins"""
        return [
            {
                'name': plugin.name,
                'priority': plugin.priority,
                'authoritative': plugin.authoritative,
                'class': plugin.__class__.__name__
            }
            for plugin in self._plugins
        ]


def resolve_page_url(soup: BeautifulSoup) -> Optional[str]:
    """Find the page's own URL from canonical or OpenGraph tags."""
    canonical = soup.find('link', rel='canonical')
    if canonical and canonical.get('href'):
        return canonical['href']
    og_url = soup.find('meta', attrs={'property': 'og:url'})
    if og_url and og_url.get('content'):
        return og_url['content']
    return None


def default_registry() -> PluginRegistry:
    """Build a registry with the built-in plugins"""
    from .schema_org import SchemaOrgPlugin
    from .seek import SeekPlugin
    from .linkedin import LinkedInPlugin
    from .page_title import PageTitlePlugin

    registry = PluginRegistry()
    for plugin in (SchemaOrgPlugin(), SeekPlugin(), LinkedInPlugin(), PageTitlePlugin()):
        registry.register(plugin)
    return registry
