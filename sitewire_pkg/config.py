"""
Build configuration handle for Sitewire.

A BuildConfig is created fresh for every build and handed to a configure()
function, which registers plugins, filters, transforms, passthrough copies and
template libraries on it. Registrations can also be expressed as a list of
Registration descriptors and applied with apply_registrations().
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

PLUGIN = 'plugin'
FILTER = 'filter'
TRANSFORM = 'transform'
PASSTHROUGH_COPY = 'passthrough_copy'
LIBRARY = 'library'

DEFAULT_TEMPLATE_FORMATS = ['md', 'markdown', 'html', 'xml']


class BuildConfig:
    """Mutable configuration handle passed to configure()."""

    def __init__(self, template_formats: Optional[List[str]] = None):
        self.template_formats = list(template_formats or DEFAULT_TEMPLATE_FORMATS)
        self.plugins: List[Tuple[Callable, Dict[str, Any]]] = []
        self.filters: Dict[str, Callable] = {}
        self.transforms: Dict[str, Callable] = {}
        self.passthrough_copies: List[str] = []
        self.libraries: Dict[str, Any] = {}
        self.global_data: Dict[str, Any] = {}
        self.markdown_highlighter: Optional[Callable] = None
        self.logger = logging.getLogger('sitewire.config')

    def add_plugin(self, plugin: Callable, **options) -> 'BuildConfig':
        """Run a plugin against this handle and remember it."""
        name = getattr(plugin, '__name__', repr(plugin))
        self.logger.debug(f"Adding plugin {name} with options {options}")
        plugin(self, **options)
        self.plugins.append((plugin, options))
        return self

    def add_filter(self, name: str, func: Callable) -> 'BuildConfig':
        if not callable(func):
            raise TypeError(f"Filter '{name}' must be callable, got {type(func).__name__}")
        if name in self.filters:
            self.logger.debug(f"Replacing filter: {name}")
        self.filters[name] = func
        return self

    def get_filter(self, name: str) -> Callable:
        return self.filters[name]

    def add_transform(self, name: str, func: Callable) -> 'BuildConfig':
        """Register func(content, output_path) to run over every written output."""
        if not callable(func):
            raise TypeError(f"Transform '{name}' must be callable, got {type(func).__name__}")
        self.transforms[name] = func
        return self

    def add_passthrough_copy(self, path: str) -> 'BuildConfig':
        if path not in self.passthrough_copies:
            self.passthrough_copies.append(path)
        return self

    def set_library(self, template_format: str, library: Any) -> 'BuildConfig':
        """Install a fully-constructed template library for a template format."""
        self.logger.debug(f"Setting library for '{template_format}': {type(library).__name__}")
        self.libraries[template_format] = library
        return self

    def get_library(self, template_format: str) -> Any:
        """
        Return the library installed for a template format, or None.

        The markdown highlighter is attached here rather than at registration
        time so set_library() and add_markdown_highlighter() may be called in
        either order.
        """
        library = self.libraries.get(template_format)
        if library is not None and self.markdown_highlighter is not None:
            set_highlighter = getattr(library, 'set_highlighter', None)
            if set_highlighter is not None:
                set_highlighter(self.markdown_highlighter)
        return library

    def add_markdown_highlighter(self, func: Callable) -> 'BuildConfig':
        self.markdown_highlighter = func
        return self

    def add_global_data(self, name: str, value: Any) -> 'BuildConfig':
        self.global_data[name] = value
        return self


class Registration(NamedTuple):
    """A single declarative registration against a BuildConfig."""
    kind: str
    target: Any
    name: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


def _apply_plugin(config, registration):
    config.add_plugin(registration.target, **(registration.options or {}))


def _apply_filter(config, registration):
    config.add_filter(registration.name, registration.target)


def _apply_transform(config, registration):
    config.add_transform(registration.name, registration.target)


def _apply_passthrough_copy(config, registration):
    config.add_passthrough_copy(registration.target)


def _apply_library(config, registration):
    config.set_library(registration.name, registration.target)


_APPLIERS = {
    PLUGIN: _apply_plugin,
    FILTER: _apply_filter,
    TRANSFORM: _apply_transform,
    PASSTHROUGH_COPY: _apply_passthrough_copy,
    LIBRARY: _apply_library,
}

_NAMED_KINDS = {FILTER, TRANSFORM, LIBRARY}


def apply_registration(config: BuildConfig, registration: Registration) -> BuildConfig:
    """Apply one Registration descriptor to a configuration handle."""
    applier = _APPLIERS.get(registration.kind)
    if applier is None:
        raise ValueError(f"Unknown registration kind: {registration.kind!r}")
    if registration.kind in _NAMED_KINDS and not registration.name:
        raise ValueError(f"A {registration.kind} registration requires a name")
    applier(config, registration)
    return config


def apply_registrations(config: BuildConfig, registrations: Iterable[Registration]) -> BuildConfig:
    for registration in registrations:
        apply_registration(config, registration)
    return config
