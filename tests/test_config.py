"""Tests for BuildConfig and registration descriptors."""

import pytest
import os
from unittest.mock import Mock

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sitewire_pkg.config import (
    BuildConfig, Registration, apply_registration, apply_registrations,
    PLUGIN, FILTER, TRANSFORM, PASSTHROUGH_COPY, LIBRARY,
)


class TestBuildConfig:
    """Test cases for the configuration handle."""

    def test_defaults(self):
        """Test a fresh handle has nothing registered."""
        config = BuildConfig()

        assert config.plugins == []
        assert config.filters == {}
        assert config.transforms == {}
        assert config.passthrough_copies == []
        assert config.libraries == {}
        assert config.template_formats == ['md', 'markdown', 'html', 'xml']

    def test_add_plugin_runs_plugin_with_options(self):
        """Test plugins are invoked with the handle and their options."""
        config = BuildConfig()
        plugin = Mock()

        result = config.add_plugin(plugin, trim=True)

        plugin.assert_called_once_with(config, trim=True)
        assert config.plugins == [(plugin, {'trim': True})]
        assert result is config

    def test_add_filter(self):
        """Test filters are stored by name and retrievable."""
        config = BuildConfig()
        config.add_filter('upper', str.upper)

        assert config.get_filter('upper')('abc') == 'ABC'

    def test_add_filter_rejects_non_callable(self):
        """Test registering a non-callable filter fails."""
        with pytest.raises(TypeError, match="must be callable"):
            BuildConfig().add_filter('broken', 'not a function')

    def test_get_unknown_filter(self):
        """Test looking up an unregistered filter raises KeyError."""
        with pytest.raises(KeyError):
            BuildConfig().get_filter('missing')

    def test_add_filter_replaces_existing(self):
        """Test re-registering a filter name replaces it."""
        config = BuildConfig()
        config.add_filter('f', str.upper)
        config.add_filter('f', str.lower)

        assert config.get_filter('f')('AbC') == 'abc'

    def test_add_passthrough_copy_deduplicates(self):
        """Test the same passthrough path is recorded once."""
        config = BuildConfig()
        config.add_passthrough_copy('src/assets').add_passthrough_copy('src/assets')

        assert config.passthrough_copies == ['src/assets']

    def test_add_transform_rejects_non_callable(self):
        """Test registering a non-callable transform fails."""
        with pytest.raises(TypeError):
            BuildConfig().add_transform('broken', None)

    def test_get_library_missing(self):
        """Test an unset template format has no library."""
        assert BuildConfig().get_library('md') is None

    def test_highlighter_attached_regardless_of_order(self):
        """Test the markdown highlighter reaches a library set before or after it."""
        highlighter = Mock()
        before = Mock()
        after = Mock()

        config = BuildConfig()
        config.set_library('md', before)
        config.add_markdown_highlighter(highlighter)
        config.set_library('markdown', after)

        assert config.get_library('md') is before
        assert config.get_library('markdown') is after
        before.set_highlighter.assert_called_with(highlighter)
        after.set_highlighter.assert_called_with(highlighter)

    def test_library_without_highlighter_support(self):
        """Test libraries that cannot take a highlighter are returned untouched."""
        class PlainLibrary:
            def render(self, text):
                return text

        library = PlainLibrary()
        config = BuildConfig()
        config.add_markdown_highlighter(Mock())
        config.set_library('md', library)

        assert config.get_library('md') is library

    def test_add_global_data(self):
        """Test global data is recorded by name."""
        config = BuildConfig().add_global_data('site', {'url': 'https://example.com'})
        assert config.global_data['site']['url'] == 'https://example.com'


class TestRegistrations:
    """Test cases for data-driven registration."""

    def test_apply_each_kind(self):
        """Test every registration kind reaches the matching handle method."""
        plugin = Mock()
        library = Mock()
        transform = Mock()
        config = apply_registrations(BuildConfig(), [
            Registration(PLUGIN, plugin, options={'a': 1}),
            Registration(FILTER, str.upper, name='upper'),
            Registration(TRANSFORM, transform, name='noop'),
            Registration(PASSTHROUGH_COPY, 'src/assets'),
            Registration(LIBRARY, library, name='md'),
        ])

        plugin.assert_called_once_with(config, a=1)
        assert config.filters['upper'] is str.upper
        assert config.transforms['noop'] is transform
        assert config.passthrough_copies == ['src/assets']
        assert config.libraries['md'] is library

    def test_apply_against_fake_handle(self):
        """Test registrations only use the handle's public methods."""
        handle = Mock()
        apply_registration(handle, Registration(FILTER, str.upper, name='upper'))
        apply_registration(handle, Registration(PASSTHROUGH_COPY, 'src/assets'))

        handle.add_filter.assert_called_once_with('upper', str.upper)
        handle.add_passthrough_copy.assert_called_once_with('src/assets')

    def test_plugin_without_options(self):
        """Test a plugin registration with no options passes none."""
        plugin = Mock()
        config = apply_registration(BuildConfig(), Registration(PLUGIN, plugin))
        plugin.assert_called_once_with(config)

    def test_unknown_kind(self):
        """Test an unknown registration kind is rejected."""
        with pytest.raises(ValueError, match="Unknown registration kind"):
            apply_registration(BuildConfig(), Registration('shortcode', Mock()))

    @pytest.mark.parametrize('kind', [FILTER, TRANSFORM, LIBRARY])
    def test_named_kinds_require_name(self, kind):
        """Test filters, transforms and libraries must be named."""
        with pytest.raises(ValueError, match="requires a name"):
            apply_registration(BuildConfig(), Registration(kind, Mock()))
