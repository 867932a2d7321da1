"""
Sitewire - configuration-driven static site building.

A site is described by a configure(config) function that registers plugins,
template filters, passthrough copies and template libraries on a BuildConfig
and returns the input and output directories. Sitewire ships a default
configuration with markdown anchors, code highlighting, feed helpers,
external link safety and CSS/JS minification.
"""

__version__ = "1.0.0"

from .config import BuildConfig, Registration, apply_registration, apply_registrations
from .site_config import DirectorySettings, configure
from .site import Site

__all__ = [
    'BuildConfig',
    'DirectorySettings',
    'Registration',
    'Site',
    'apply_registration',
    'apply_registrations',
    'configure',
]
