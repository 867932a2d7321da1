"""Plugins bundled with Sitewire."""

from .external_links import external_links_plugin
from .rss import rss_plugin
from .syntax_highlight import syntax_highlight_plugin

__all__ = ['external_links_plugin', 'rss_plugin', 'syntax_highlight_plugin']
