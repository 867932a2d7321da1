"""Tests for template filters."""

import pytest
import os
import re

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sitewire_pkg.filters import cssmin, dump, jsmin

STYLESHEETS = [
    "body {\n    color: red;\n}\n",
    "/* header */\nh1, h2 {\n  margin: 0px;\n  padding: 0 0 0 0;\n}\n\na:hover { color: #ffffff; }\n",
    ".a { }\n.b { font-weight: bold; }\n",
    "",
]


class TestCssmin:
    """Test cases for the cssmin filter."""

    @pytest.mark.parametrize('css', STYLESHEETS)
    def test_not_longer_than_collapsed_input(self, css):
        """Test minified output never exceeds whitespace-collapsed input."""
        collapsed = re.sub(r'\s+', ' ', css).strip()
        assert len(cssmin(css)) <= len(collapsed)

    @pytest.mark.parametrize('css', STYLESHEETS)
    def test_idempotent(self, css):
        """Test minifying twice gives the same result."""
        once = cssmin(css)
        assert cssmin(once) == once

    def test_removes_whitespace(self):
        """Test whitespace between declarations is removed."""
        result = cssmin("body {\n    color: red;\n}\n")

        assert 'color:red' in result
        assert '\n' not in result
        assert result.startswith('body{')


class TestJsmin:
    """Test cases for the jsmin filter."""

    def test_strips_comments_and_whitespace(self):
        """Test comments and indentation are removed."""
        script = "// greet\nfunction greet(name) {\n    return 'Hi ' + name;\n}\n"
        result = jsmin(script)

        assert 'greet' in result
        assert '//' not in result
        assert len(result) < len(script)


class TestDump:
    """Test cases for the dump filter."""

    def test_mapping(self):
        """Test a mapping dumps its keys and values."""
        result = dump({'title': 'Home', 'tags': ['posts']})

        assert result
        assert "'title'" in result
        assert "'Home'" in result
        assert "'posts'" in result

    def test_preserves_key_order(self):
        """Test keys are shown in insertion order."""
        result = dump({'zeta': 1, 'alpha': 2})
        assert result.index('zeta') < result.index('alpha')

    @pytest.mark.parametrize('value', [None, 0, '', [], object()])
    def test_never_empty(self, value):
        """Test any value produces some text."""
        assert dump(value)
