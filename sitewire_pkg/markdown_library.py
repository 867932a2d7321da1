"""
Markdown template library for Sitewire.

Wraps a mistune parser with a custom renderer so that the options a site
configures (raw HTML, hard line breaks, bare URL linking, typography, heading
anchors and fenced code highlighting) are decided once, when the library is
constructed, and then reused for every markdown template.
"""

import html
import re
from typing import Callable, Iterable, NamedTuple, Optional
from urllib.parse import quote

import mistune
import smartypants
from mistune.util import escape_url

DEFAULT_PLUGINS = ('table', 'task_lists', 'strikethrough')

# smart quotes (&quot; included), backticks, "--" en dash / "---" em dash, ellipses, as unicode
TYPOGRAPHY_ATTRS = smartypants.Attr.set2 | smartypants.Attr.w | smartypants.Attr.u

# Applied in order, before smart quotes and dashes.
REPLACEMENTS = (
    (re.compile(r'\(c\)', re.IGNORECASE), '©'),
    (re.compile(r'\(r\)', re.IGNORECASE), '®'),
    (re.compile(r'\(tm\)', re.IGNORECASE), '™'),
    (re.compile(r'\+-'), '±'),
    (re.compile(r'\.{2,}'), '…'),
    (re.compile(r'([?!])…'), r'\1..'),
    (re.compile(r'([?!]){4,}'), r'\1\1\1'),
    (re.compile(r',{2,}'), ','),
)

URL_LINK_PATTERN = r'''https?:\/\/[^\s<]+[^<.,:;"')\]\s]'''

_TAG_RE = re.compile(r'<[^>]+>')
_WHITESPACE_RE = re.compile(r'\s+')


def typeset(text):
    """Apply symbol replacements, smart quotes, dashes and ellipses to a text run."""
    for pattern, replacement in REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return smartypants.smartypants(text, TYPOGRAPHY_ATTRS)


def slugify(text):
    """Turn heading text into an id the way encodeURIComponent would."""
    slug = _WHITESPACE_RE.sub('-', text.strip().lower())
    return quote(slug, safe="-_.!~*'()")


def _plain_text(rendered):
    return html.unescape(_TAG_RE.sub('', rendered))


class AriaHiddenPermalink:
    """Permalink marker hidden from assistive technology."""

    PLACEMENTS = ('before', 'after')

    def __init__(self, placement='after', css_class='header-anchor', symbol='#',
                 level: Iterable[int] = (1, 2, 3, 4, 5, 6), space=True):
        if placement not in self.PLACEMENTS:
            raise ValueError(f"Unsupported permalink placement: {placement!r}")
        self.placement = placement
        self.css_class = css_class
        self.symbol = symbol
        self.level = tuple(level)
        self.space = space

    def __call__(self, slug, text):
        link = '<a class="{}" href="#{}" aria-hidden="true">{}</a>'.format(
            html.escape(self.css_class), slug, self.symbol)
        separator = ' ' if self.space else ''
        if self.placement == 'before':
            return link + separator + text
        return text + separator + link


def permalink_aria_hidden(**options):
    return AriaHiddenPermalink(**options)


def _parse_url_link(inline, m, state):
    url = m.group(0)
    if state.in_link:
        inline.process_text(url, state)
        return m.end()
    # link text keeps the url verbatim, so it is never typeset
    state.append_token({
        'type': 'link',
        'children': [{'type': 'url_text', 'raw': url}],
        'attrs': {'url': escape_url(url)},
    })
    return m.end()


def linkify_urls(md):
    """Turn bare http(s) URLs into links."""
    md.inline.register('url_link', URL_LINK_PATTERN, _parse_url_link)


class AnchorOptions(NamedTuple):
    permalink: Optional[Callable] = None
    slugify: Callable = slugify
    tab_index: Optional[int] = -1


class MarkdownRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors and pluggable code highlighting."""

    def __init__(self, escape=True, typographer=False):
        super().__init__(escape=escape)
        self.typographer = typographer
        self.anchor: Optional[AnchorOptions] = None
        self.highlighter: Optional[Callable] = None
        self._slugs = set()

    def reset(self):
        self._slugs = set()

    def text(self, text):
        output = super().text(text)
        if self.typographer:
            output = typeset(output)
        return output

    def url_text(self, text):
        return super().text(text)

    def _unique_slug(self, slug):
        unique = slug
        index = 1
        while unique in self._slugs:
            unique = f"{slug}-{index}"
            index += 1
        self._slugs.add(unique)
        return unique

    def heading(self, text, level, **attrs):
        if self.anchor is None:
            return super().heading(text, level, **attrs)

        tag = 'h' + str(level)
        slug = self._unique_slug(self.anchor.slugify(_plain_text(text)))
        opening = f'<{tag} id="{slug}"'
        if self.anchor.tab_index is not None:
            opening += f' tabindex="{self.anchor.tab_index}"'

        permalink = self.anchor.permalink
        if permalink is not None and level in getattr(permalink, 'level', (level,)):
            text = permalink(slug, text)
        return f'{opening}>{text}</{tag}>\n'

    def block_code(self, code, info=None):
        if self.highlighter is not None and info and info.strip():
            highlighted = self.highlighter(code, info.strip())
            if highlighted is not None:
                return highlighted + '\n'
        return super().block_code(code, info)


class MarkdownLibrary:
    """A configured markdown engine exposing render(text) -> html."""

    def __init__(self, html=False, breaks=False, linkify=False, typographer=False,
                 plugins=DEFAULT_PLUGINS):
        self.html = html
        self.breaks = breaks
        self.linkify = linkify
        self.typographer = typographer

        self.plugins = tuple(plugins)

        self.renderer = MarkdownRenderer(escape=not html, typographer=typographer)
        self._markdown = mistune.create_markdown(
            renderer=self.renderer,
            hard_wrap=breaks,
            plugins=list(self.plugins),
        )
        if linkify:
            linkify_urls(self._markdown)

    def use(self, extension, **options):
        """Apply an extension and return the library for chaining."""
        extension(self, **options)
        return self

    def set_highlighter(self, highlighter):
        self.renderer.highlighter = highlighter

    def render(self, text):
        self.renderer.reset()
        return self._markdown(text)


def anchor(library, permalink=None, slugify=slugify, tab_index=-1):
    """Give every heading an id, and a permalink marker on the configured levels."""
    library.renderer.anchor = AnchorOptions(permalink=permalink, slugify=slugify, tab_index=tab_index)
