"""
External links plugin.

Adds a transform that marks links leaving the site so they open in a new
browsing context without leaking the opener or referrer.
"""

import logging
import os
import re
from urllib.parse import urlparse

logger = logging.getLogger('sitewire.plugins.external_links')

EXTERNAL_RE = re.compile(r'^(([a-z]+:)|(//))', re.IGNORECASE)

_ANCHOR_RE = re.compile(r'<a\b([^>]*)>', re.IGNORECASE)
_HREF_RE = re.compile(r'\bhref\s*=\s*(["\'])(.*?)\1', re.IGNORECASE | re.DOTALL)


def _attr_re(name):
    return re.compile(r'\s+' + name + r'\s*=\s*(["\']).*?\1', re.IGNORECASE | re.DOTALL)


_TARGET_RE = _attr_re('target')
_REL_RE = _attr_re('rel')


def _is_own_site(href, site_url):
    link = urlparse(href)
    site = urlparse(site_url)
    if not link.netloc or link.netloc.lower() != site.netloc.lower():
        return False
    # protocol-relative hrefs take the site's scheme
    if link.scheme and link.scheme.lower() != site.scheme.lower():
        return False
    site_path = site.path.rstrip('/')
    return not site_path or link.path == site_path or link.path.startswith(site_path + '/')


def is_external(href, site_url=None):
    if not EXTERNAL_RE.match(href):
        return False
    return not (site_url and _is_own_site(href, site_url))


def mark_external_links(content, target='_blank', rel=('noreferrer', 'noopener'),
                        site_url=None, overwrite=True):
    """Add target and rel attributes to every external <a> tag in content."""
    rel_value = ' '.join(rel)

    def replace(match):
        attrs = match.group(1)
        href = _HREF_RE.search(attrs)
        if href is None or not is_external(href.group(2), site_url):
            return match.group(0)

        self_closing = attrs.rstrip().endswith('/')
        if self_closing:
            attrs = attrs.rstrip()[:-1]

        if overwrite:
            attrs = _REL_RE.sub('', _TARGET_RE.sub('', attrs))
        attrs = attrs.rstrip()
        if target and not _TARGET_RE.search(attrs):
            attrs += f' target="{target}"'
        if rel_value and not _REL_RE.search(attrs):
            attrs += f' rel="{rel_value}"'
        return f'<a{attrs}{" /" if self_closing else ""}>'

    return _ANCHOR_RE.sub(replace, content)


def external_links_plugin(config, name='external-links', target='_blank',
                          rel=('noreferrer', 'noopener'), url=None, overwrite=True,
                          extensions=('.html',)):
    def transform(content, output_path):
        if extensions and os.path.splitext(output_path or '')[1] not in extensions:
            return content
        site_url = url or (config.global_data.get('site') or {}).get('url')
        logger.debug(f"Marking external links in {output_path}")
        return mark_external_links(content, target=target, rel=rel,
                                   site_url=site_url, overwrite=overwrite)

    config.add_transform(name, transform)
