"""Template filters registered by the default site configuration."""

import pprint

import csscompressor
import rjsmin


def cssmin(code):
    """Minify a stylesheet."""
    return csscompressor.compress(code)


def jsmin(code):
    """Minify a script."""
    return rjsmin.jsmin(code)


def dump(value):
    """Return a debug representation of any template value."""
    return pprint.pformat(value, indent=2, sort_dicts=False)
