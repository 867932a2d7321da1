"""
Minimal build host for Sitewire.

A Site applies a configure() function to a fresh BuildConfig, then renders the
registered template formats from the input directory into the output
directory: passthrough copies first, then markdown and Jinja templates with
their layouts, then the registered transforms over every written file.
"""

import importlib.util
import logging
import os
import shutil
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from .config import BuildConfig
from .markdown_library import MarkdownLibrary
from .site_config import INPUT_DIR, OUTPUT_DIR, DirectorySettings
from .site_config import configure as default_configure
from .utils import as_utc, parse_date

MARKDOWN_FORMATS = ('md', 'markdown')
INCLUDES_DIR = '_includes'


class InfoFilter(logging.Filter):
    """Filter to allow only build summary INFO messages in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Starting site build",
            "Site build completed in",
            "Total templates written:",
            "Total files copied:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def load_configure(path):
    """Load the configure() function from a Python configuration file."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")
    spec = importlib.util.spec_from_file_location('sitewire_user_config', path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load configuration file: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    configure = getattr(module, 'configure', None)
    if not callable(configure):
        raise AttributeError(f"Configuration file {path} does not define configure(config)")
    return configure


def parse_front_matter(content):
    """Split YAML front matter from a template body."""
    if not content.startswith('---'):
        return {}, content
    parts = content.split('---', 2)
    if len(parts) < 3:
        return {}, content
    metadata = yaml.safe_load(parts[1]) or {}
    if not isinstance(metadata, dict):
        raise ValueError("Front matter must be a mapping")
    return metadata, parts[2].lstrip('\n')


def _resolve_dirs(result):
    if result is None:
        return DirectorySettings(input=INPUT_DIR, output=OUTPUT_DIR)
    if isinstance(result, dict):
        dirs = result.get('dir', result)
        return DirectorySettings(input=dirs.get('input', INPUT_DIR), output=dirs.get('output', OUTPUT_DIR))
    return DirectorySettings(input=result.input, output=result.output)


class Site:
    def __init__(self, root='.', configure=None, settings: Optional[Dict[str, Any]] = None, log_dir='logs'):
        self.root = os.path.abspath(root)
        self.settings = settings or {}
        self.log_dir = log_dir
        self.templates_written = 0
        self.files_copied = 0

        self.setup_logging()

        self.config = BuildConfig()
        self.config.add_global_data('site', {
            'url': self.settings.get('site_url'),
            'title': self.settings.get('site_title'),
        })
        self.dirs = _resolve_dirs((configure or default_configure)(self.config))

        self.input_dir = os.path.join(self.root, self.dirs.input)
        self.output_dir = os.path.join(self.root, self.dirs.output)
        self.includes_dir = os.path.join(self.input_dir, INCLUDES_DIR)

        self.env = Environment(loader=FileSystemLoader([self.includes_dir, self.input_dir]))
        self.env.filters.update(self.config.filters)
        self.env.globals.update(self.config.global_data)

        self.default_markdown = MarkdownLibrary()

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('sitewire')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

            if self.log_dir:
                logs_dir = os.path.join(self.root, self.log_dir)
                os.makedirs(logs_dir, exist_ok=True)
                log_filename = datetime.now().strftime('sitewire_%Y-%m-%d_%H-%M-%S.log')
                file_handler = logging.FileHandler(os.path.join(logs_dir, log_filename))
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
                self.logger.addHandler(file_handler)

    def _passthrough_sources(self):
        return [os.path.join(self.root, path) for path in self.config.passthrough_copies]

    def copy_passthrough(self):
        """Copy every passthrough path verbatim into the output tree."""
        for path, source in zip(self.config.passthrough_copies, self._passthrough_sources()):
            if not os.path.exists(source):
                self.logger.warning(f"Passthrough copy source not found: {path}")
                continue

            relative = os.path.relpath(source, self.input_dir)
            if relative.startswith(os.pardir):
                relative = os.path.normpath(path)
            destination = os.path.join(self.output_dir, relative)

            if os.path.isdir(source):
                for dirpath, _, filenames in os.walk(source):
                    target_dir = os.path.join(destination, os.path.relpath(dirpath, source))
                    os.makedirs(target_dir, exist_ok=True)
                    for filename in filenames:
                        shutil.copy2(os.path.join(dirpath, filename), os.path.join(target_dir, filename))
                        self.files_copied += 1
            else:
                os.makedirs(os.path.dirname(destination), exist_ok=True)
                shutil.copy2(source, destination)
                self.files_copied += 1
            self.logger.debug(f"Copied {path} -> {os.path.relpath(destination, self.root)}")

    def output_path_for(self, relative_path, template_format, metadata):
        """Return (url, output_path) for a template."""
        permalink = metadata.get('permalink')
        if permalink:
            url = '/' + str(permalink).lstrip('/')
        else:
            directory, filename = os.path.split(relative_path.replace(os.sep, '/'))
            stem = os.path.splitext(filename)[0]
            if template_format not in MARKDOWN_FORMATS and template_format != 'html':
                url = '/' + relative_path.replace(os.sep, '/')
            elif stem == 'index':
                url = f'/{directory}/' if directory else '/'
            else:
                url = f'/{directory}/{stem}/' if directory else f'/{stem}/'

        output_relative = url.lstrip('/')
        if url.endswith('/'):
            output_relative += 'index.html'
        output_path = os.path.normpath(os.path.join(self.output_dir, *output_relative.split('/')))
        if not output_path.startswith(os.path.abspath(self.output_dir) + os.sep):
            raise ValueError(f"Permalink escapes the output directory: {permalink}")
        return url, output_path

    def collect_pages(self) -> List[Dict[str, Any]]:
        """Read every template of a registered format from the input directory."""
        skipped_dirs = {os.path.abspath(source) for source in self._passthrough_sources()}
        skipped_dirs.add(os.path.abspath(self.output_dir))
        pages = []

        for dirpath, dirnames, filenames in os.walk(self.input_dir):
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(('_', '.')) and os.path.abspath(os.path.join(dirpath, d)) not in skipped_dirs
            )
            for filename in sorted(filenames):
                template_format = os.path.splitext(filename)[1][1:].lower()
                if filename.startswith(('_', '.')) or template_format not in self.config.template_formats:
                    continue
                file_path = os.path.join(dirpath, filename)
                pages.append(self.read_page(file_path, template_format))

        return pages

    def read_page(self, file_path, template_format):
        relative_path = os.path.relpath(file_path, self.input_dir)
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        try:
            metadata, body = parse_front_matter(content)
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid YAML front matter in {relative_path}: {e}")
            metadata, body = {}, content

        url, output_path = self.output_path_for(relative_path, template_format, metadata)
        if 'date' in metadata:
            page_date = parse_date(metadata['date'])
        else:
            page_date = datetime.fromtimestamp(os.path.getmtime(file_path))

        page = {
            'input_path': relative_path,
            'format': template_format,
            'data': metadata,
            'body': body,
            'url': url,
            'output_path': output_path,
            'date': page_date,
            'content': None,
        }
        if template_format in MARKDOWN_FORMATS:
            page['content'] = self.render_markdown(body, template_format)
        return page

    def render_markdown(self, text, template_format='md'):
        library = self.config.get_library(template_format) or self.default_markdown
        return library.render(text)

    def build_collections(self, pages):
        ordered = sorted(pages, key=lambda p: (as_utc(p['date']), p['input_path']))
        collections = {'all': ordered}
        for page in ordered:
            tags = page['data'].get('tags') or []
            if isinstance(tags, str):
                tags = [tags]
            for tag in tags:
                collections.setdefault(tag, []).append(page)
        return collections

    def render_page(self, page, collections):
        context = dict(self.config.global_data)
        context.update(page['data'])
        context['page'] = {
            'url': page['url'],
            'input_path': page['input_path'],
            'output_path': page['output_path'],
            'date': page['date'],
        }
        context['collections'] = collections

        if page['format'] in MARKDOWN_FORMATS:
            content = page['content']
        else:
            content = self.env.from_string(page['body']).render(**context)
            page['content'] = content

        layout = page['data'].get('layout')
        if layout:
            context['content'] = content
            content = self.env.get_template(layout).render(**context)

        for transform in self.config.transforms.values():
            content = transform(content, page['output_path'])
        return content

    def write_page(self, page, collections):
        try:
            content = self.render_page(page, collections)
        except Exception:
            self.logger.error(f"Failed to render {page['input_path']}")
            raise

        os.makedirs(os.path.dirname(page['output_path']), exist_ok=True)
        with open(page['output_path'], 'w', encoding='utf-8') as f:
            f.write(content)
        self.templates_written += 1
        self.logger.debug(f"Writing {os.path.relpath(page['output_path'], self.root)} from {page['input_path']}")

    def build(self):
        """Main build process."""
        start_time = time.time()
        self.logger.info("Starting site build...")
        self.templates_written = 0
        self.files_copied = 0

        os.makedirs(self.output_dir, exist_ok=True)
        self.copy_passthrough()

        pages = self.collect_pages()
        collections = self.build_collections(pages)
        for page in pages:
            self.write_page(page, collections)

        elapsed = time.time() - start_time
        self.logger.info(f"Site build completed in {elapsed:.6f} seconds.")
        self.logger.info(f"Total templates written: {self.templates_written}")
        self.logger.info(f"Total files copied: {self.files_copied}")
        return {
            'templates_written': self.templates_written,
            'files_copied': self.files_copied,
            'elapsed': elapsed,
        }
