#!/usr/bin/env python3
"""
Command-line interface for Sitewire.
"""

import os
import sys
import argparse
from typing import List, Optional

from . import __version__
from .settings import SitewireSettings
from .site import Site, load_configure

DEFAULT_CONFIG_FILE = 'sitewire_config.py'

STARTER_FILES = {
    DEFAULT_CONFIG_FILE: '''from sitewire_pkg.site_config import configure as default_configure


def configure(config):
    dirs = default_configure(config)
    # Register your own filters, plugins and passthrough copies here, e.g.
    # config.add_filter('shout', lambda text: text.upper())
    return dirs
''',
    'src/_includes/base.html': '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>{{ title }} | {{ site.title }}</title>
    <link rel="stylesheet" href="/assets/css/site.css">
</head>
<body>
    <main>{{ content }}</main>
</body>
</html>
''',
    'src/index.md': '''---
title: Home
layout: base.html
tags: posts
date: 2025-01-01
---

# Welcome

Edit `src/index.md` and run "sitewire" to rebuild your site.

```python/0
print("Hello from Sitewire")
```
''',
    'src/feed.xml': '''---
permalink: /feed.xml
---
<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>{{ site.title }}</title>
  <link href="{{ '/feed.xml' | absolute_url(site.url) }}" rel="self"/>
  <updated>{{ collections.posts | get_newest_collection_item_date | date_to_rfc3339 }}</updated>
  <id>{{ site.url }}</id>
  {%- for post in collections.posts | reverse %}
  <entry>
    <title>{{ post.data.title }}</title>
    <link href="{{ post.url | absolute_url(site.url) }}"/>
    <updated>{{ post.date | date_to_rfc3339 }}</updated>
    <id>{{ post.url | absolute_url(site.url) }}</id>
    <content type="html">{{ post.content | html_to_absolute_urls(site.url) | e }}</content>
  </entry>
  {%- endfor %}
</feed>
''',
    'src/assets/css/site.css': '''body {
    font-family: sans-serif;
    margin: 0 auto;
    max-width: 40rem;
}

.direct-link {
    opacity: 0.4;
    text-decoration: none;
}
''',
}


def create_starter_structure(root: str) -> None:
    """Create a starter project with a config file, templates, content and assets."""
    for relative_path, content in STARTER_FILES.items():
        path = os.path.join(root, *relative_path.split('/'))
        if os.path.exists(path):
            print(f"File already exists: {relative_path}")
            continue
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        print(f"Created: {relative_path}")


def resolve_config_path(root: str, config: Optional[str]) -> Optional[str]:
    """Return the configuration file to load, or None for the built-in setup."""
    if config:
        return config if os.path.isabs(config) else os.path.join(root, config)
    default_path = os.path.join(root, DEFAULT_CONFIG_FILE)
    if os.path.exists(default_path):
        return default_path
    return None


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Sitewire - Static Site Builder')
    parser.add_argument('--root', type=str, default='.',
                        help='Project root containing the source directory')
    parser.add_argument('--config', type=str,
                        help=f'Python file defining configure(config) (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('--site-url', type=str,
                        help='Site URL used for feeds and external link detection')
    parser.add_argument('--site-title', type=str, help='Site title for templates')
    parser.add_argument('--log-dir', type=str, help='Directory for build logs')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter project')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)
    root = os.path.abspath(args.root)

    settings_loader = SitewireSettings(root)

    if args.init:
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        create_starter_structure(root)
        print("\nYour new Sitewire site is ready! Run 'sitewire' to build it.")
        return

    settings_loader.load_settings()
    args_dict = {k: v for k, v in vars(args).items() if v is not None and k not in ('root', 'init')}
    final_settings = settings_loader.merge_with_args(args_dict)

    try:
        config_path = resolve_config_path(root, final_settings['config'])
        configure = load_configure(config_path) if config_path else None

        site = Site(
            root=root,
            configure=configure,
            settings=final_settings,
            log_dir=final_settings['log_dir'],
        )
        site.build()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
