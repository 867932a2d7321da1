"""
Feed plugin.

Registers the filters a feed template needs to turn site content into an RSS
or Atom document: absolute URLs, feed-formatted dates and the newest date in a
collection. The feed markup itself lives in the site's own template.
"""

import re
from email.utils import format_datetime
from urllib.parse import urljoin, urlparse

from ..utils import as_utc

_URL_ATTR_RE = re.compile(r'(\s(?:href|src)\s*=\s*)(["\'])(.*?)\2', re.IGNORECASE)


def absolute_url(url, base):
    """Resolve url against base."""
    return urljoin(base, url)


def _is_relative(url):
    if not url or url.startswith('#') or url.startswith('//'):
        return False
    return not urlparse(url).scheme


def html_to_absolute_urls(html, base):
    """Rewrite relative href and src attributes in an HTML fragment to absolute URLs."""
    def replace(match):
        prefix, quote, url = match.groups()
        if not _is_relative(url):
            return match.group(0)
        return f'{prefix}{quote}{urljoin(base, url)}{quote}'

    return _URL_ATTR_RE.sub(replace, html)


def date_to_rfc3339(value):
    return as_utc(value).strftime('%Y-%m-%dT%H:%M:%SZ')


def date_to_rfc822(value):
    return format_datetime(as_utc(value), usegmt=True)


def get_newest_collection_item_date(collection):
    """Return the most recent item date in a collection, or None if it is empty."""
    dates = [item['date'] for item in collection if item.get('date') is not None]
    if not dates:
        return None
    return max(dates, key=as_utc)


def rss_plugin(config):
    config.add_filter('absolute_url', absolute_url)
    config.add_filter('html_to_absolute_urls', html_to_absolute_urls)
    config.add_filter('date_to_rfc3339', date_to_rfc3339)
    config.add_filter('date_to_rfc822', date_to_rfc822)
    config.add_filter('get_newest_collection_item_date', get_newest_collection_item_date)
