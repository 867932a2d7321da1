"""
Syntax highlighting plugin.

Highlights code with Pygments and wraps each output line so individual lines
can be marked as active, added or removed. Fenced code in markdown and the
``highlight`` Jinja filter share the same Highlighter.
"""

import html
import logging
import re

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

logger = logging.getLogger('sitewire.plugins.syntax_highlight')

_RANGE_SPLIT_RE = re.compile(r'[,\s]+')


def parse_line_ranges(spec):
    """Parse '1,3-5' (or '1 3-5') into a set of zero-based line indexes.

    Parts that are not a number or a range of numbers are skipped.
    """
    lines = set()
    for part in _RANGE_SPLIT_RE.split(spec.strip()):
        if not part:
            continue
        try:
            if '-' in part:
                start, end = part.split('-', 1)
                lines.update(range(int(start), int(end) + 1))
            else:
                lines.add(int(part))
        except ValueError:
            logger.debug(f"Ignoring malformed line range: {part!r}")
    return lines


def parse_info(info):
    """
    Split a fence info string into a language and line markers.

    Returns (language, active, added, removed) where the last three are sets
    of zero-based line indexes. ``lang/1-2`` marks active lines and
    ``lang/1/3`` marks added and removed lines.
    """
    parts = info.strip().split(None, 1)[0].split('/') if info.strip() else ['']
    language = parts[0].lower()
    active, added, removed = set(), set(), set()
    if len(parts) == 2:
        active = parse_line_ranges(parts[1])
    elif len(parts) >= 3:
        added = parse_line_ranges(parts[1])
        removed = parse_line_ranges(parts[2])
    return language, active, added, removed


class Highlighter:
    """Callable highlighter: highlighter(code, info) -> html."""

    def __init__(self, always_wrap_line_highlights=False, trim=True, line_separator='<br>'):
        self.always_wrap_line_highlights = always_wrap_line_highlights
        self.trim = trim
        self.line_separator = line_separator
        self.formatter = HtmlFormatter(nowrap=True)

    def _get_lexer(self, language):
        try:
            return get_lexer_by_name(language, stripnl=False)
        except ClassNotFound:
            logger.debug(f"No lexer for language '{language}', using plain text")
            return TextLexer(stripnl=False)

    def _wrap_line(self, index, line, active, added, removed, wrap):
        if index in active:
            return f'<mark class="highlight-line highlight-line-active">{line}</mark>'
        if index in added:
            return f'<ins class="highlight-line highlight-line-add">{line}</ins>'
        if index in removed:
            return f'<del class="highlight-line highlight-line-remove">{line}</del>'
        if wrap:
            return f'<span class="highlight-line">{line}</span>'
        return line

    def __call__(self, code, info):
        language, active, added, removed = parse_info(info)
        if not language:
            return None
        if self.trim:
            code = code.strip()

        output = pygments_highlight(code, self._get_lexer(language), self.formatter)
        if output.endswith('\n'):
            output = output[:-1]

        wrap = self.always_wrap_line_highlights or bool(active or added or removed)
        lines = [
            self._wrap_line(index, line, active, added, removed, wrap)
            for index, line in enumerate(output.split('\n'))
        ]

        css_class = 'language-' + html.escape(language)
        return '<pre class="{0}"><code class="{0}">{1}</code></pre>'.format(
            css_class, self.line_separator.join(lines))


def syntax_highlight_plugin(config, template_formats=('*',), always_wrap_line_highlights=False,
                            trim=True, line_separator='<br>'):
    """Register code highlighting for markdown fences and Jinja templates."""
    highlighter = Highlighter(
        always_wrap_line_highlights=always_wrap_line_highlights,
        trim=trim,
        line_separator=line_separator,
    )
    formats = set(template_formats)

    if formats & {'*', 'md', 'markdown'}:
        config.add_markdown_highlighter(highlighter)

    if formats & {'*', 'html', 'xml'}:
        def highlight(code, info):
            result = highlighter(code, info)
            return result if result is not None else '<pre><code>{}</code></pre>'.format(html.escape(code))
        config.add_filter('highlight', highlight)

    return highlighter
