"""
Default site configuration.

configure() is called once per build with a fresh BuildConfig. It registers
the feed and external-link plugins, the asset passthrough, the template
filters, code highlighting and the markdown library, then returns where
sources live and where the generated site is written.
"""

from typing import NamedTuple

from .config import FILTER, LIBRARY, PASSTHROUGH_COPY, PLUGIN, Registration, apply_registrations
from .filters import cssmin, dump, jsmin
from .markdown_library import MarkdownLibrary, anchor, permalink_aria_hidden
from .plugins import external_links_plugin, rss_plugin, syntax_highlight_plugin

INPUT_DIR = 'src'
OUTPUT_DIR = '_site'
ASSETS_DIR = 'src/assets'


class DirectorySettings(NamedTuple):
    input: str
    output: str


def create_markdown_library():
    return MarkdownLibrary(
        html=True,
        breaks=True,
        linkify=True,
        typographer=True,
    ).use(
        anchor,
        permalink=permalink_aria_hidden(
            placement='after',
            css_class='direct-link',
            symbol='#',
            level=[1, 2, 3, 4],
        ),
    )


def registrations():
    """Return the registrations applied by configure(), in order."""
    markdown_library = create_markdown_library()
    return [
        Registration(PLUGIN, rss_plugin),
        Registration(PLUGIN, external_links_plugin),
        Registration(PASSTHROUGH_COPY, ASSETS_DIR),
        Registration(FILTER, dump, name='dump'),
        Registration(FILTER, cssmin, name='cssmin'),
        Registration(FILTER, jsmin, name='jsmin'),
        Registration(PLUGIN, syntax_highlight_plugin, options={
            'template_formats': ['html', 'md'],
            'always_wrap_line_highlights': True,
            'trim': True,
            'line_separator': '\n',
        }),
        Registration(LIBRARY, markdown_library, name='md'),
        Registration(LIBRARY, markdown_library, name='markdown'),
    ]


def configure(config):
    apply_registrations(config, registrations())
    return DirectorySettings(input=INPUT_DIR, output=OUTPUT_DIR)
