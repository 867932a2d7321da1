"""Test configuration and fixtures for Sitewire tests."""

import pytest
import tempfile
import shutil
import logging
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_sitewire_logger():
    """Drop handlers added by Site so every test configures logging afresh."""
    yield
    logger = logging.getLogger('sitewire')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def site_root(temp_dir):
    """Create a project with sources under src/."""
    root = Path(temp_dir)
    src = root / 'src'
    (src / '_includes').mkdir(parents=True)
    (src / 'assets' / 'css').mkdir(parents=True)
    (src / 'assets' / 'images').mkdir(parents=True)
    (src / 'posts').mkdir()

    (src / '_includes' / 'base.html').write_text("""<!DOCTYPE html>
<html>
<head><title>{{ title }} | {{ site.title }}</title></head>
<body>
<main>{{ content }}</main>
</body>
</html>""")

    (src / 'index.md').write_text("""---
title: Home
layout: base.html
---

# Title

Read [the docs](https://docs.example.org/) or [about us](/about/).
""")

    (src / 'about.html').write_text("""---
title: About
---
<p>{{ "body { color: red; }" | cssmin }}</p>""")

    (src / 'posts' / 'first.md').write_text("""---
title: First Post
date: 2023-01-01
tags: posts
---

First post body.
""")

    (src / 'posts' / 'second.md').write_text("""---
title: Second Post
date: 2023-02-01
tags: [posts, news]
---

Second post with an [image](img/photo.png).
""")

    (src / 'feed.xml').write_text("""---
permalink: /feed.xml
---
<feed>
<updated>{{ collections.posts | get_newest_collection_item_date | date_to_rfc3339 }}</updated>
{%- for post in collections.posts %}
<entry><title>{{ post.data.title }}</title><link href="{{ post.url | absolute_url(site.url) }}"/></entry>
{%- endfor %}
</feed>
""")

    (src / 'assets' / 'css' / 'site.css').write_text("body {\n    color: red;\n}\n")
    (src / 'assets' / 'images' / 'dot.png').write_bytes(b'\x89PNG\r\n\x1a\n\x00\x01\x02\xff')

    return str(root)
