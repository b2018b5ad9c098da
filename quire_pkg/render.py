"""
Rendering: markdown conversion and Jinja2 templating for content records.
"""

import logging
import os
import threading

import mistune
from jinja2 import DictLoader, Environment, TemplateError, TemplateNotFound, TemplateSyntaxError

from .errors import BuildIOError, QuireError, TemplateRenderError
from .metadata import Kind
from .routes import url_for
from .utils import expand_glob, glob_base, to_posix

# Replaced verbatim in a markdown page's template so that template syntax
# inside the markdown is rendered exactly once
CONTENT_PLACEHOLDER = '{{ content | safe }}'

logger = logging.getLogger('Quire.render')

# Markdown parsers are created per worker thread
thread_local = threading.local()


def create_markdown_parser():
    """Create a Mistune markdown parser with a custom renderer."""
    class CustomRenderer(mistune.HTMLRenderer):
        def __init__(self):
            super().__init__(escape=False)

        def block_code(self, code, info=None):
            escaped_code = mistune.escape(code)
            if info:
                lang = mistune.escape(info.strip().split(None, 1)[0])
                return f'<pre><code class="language-{lang}">{escaped_code}</code></pre>\n'
            return f'<pre><code>{escaped_code}</code></pre>\n'

    return mistune.create_markdown(
        renderer=CustomRenderer(),
        plugins=['table', 'task_lists', 'strikethrough']
    )


def markdown_to_html(text):
    """Convert markdown text to HTML using this thread's parser."""
    parser = getattr(thread_local, 'markdown_parser', None)
    if parser is None:
        parser = thread_local.markdown_parser = create_markdown_parser()
    return parser(text)


class TemplateCatalog:
    """Named template sources loaded from the `Template` globs."""

    def __init__(self, templates=None):
        self.templates = dict(templates or {})

    def load_glob(self, source_dir, pattern):
        """Add every file matching pattern, named relative to the glob's base directory."""
        base = os.path.join(source_dir, glob_base(pattern))
        for absolute, _ in expand_glob(source_dir, pattern):
            name = to_posix(os.path.relpath(absolute, base))
            try:
                with open(absolute, 'r', encoding='utf-8') as f:
                    self.templates[name] = f.read()
            except (IOError, OSError, UnicodeDecodeError) as e:
                raise BuildIOError(absolute, "Unable to load template from", e)
            logger.debug(f"Loaded template {name}")
        return self

    def source(self, name):
        if name not in self.templates:
            raise TemplateRenderError(f"Couldn't load template '{name}'")
        return self.templates[name]

    def __contains__(self, name):
        return name in self.templates

    def __len__(self):
        return len(self.templates)


class Renderer:
    """
    Render content records against the site-wide aggregates.

    The aggregates are converted to plain template values once, when the
    renderer is created; render() can then be called from worker threads.
    """

    def __init__(self, config, catalog, navbar, post_index, sitemap):
        self.config = config
        self.catalog = catalog
        self.navbar = navbar
        self.post_index = post_index
        if Kind.BLOG_POST in config.sources.values() and config.blogpost_template not in catalog:
            raise TemplateRenderError(f"Couldn't load template '{config.blogpost_template}'")
        self.env =Environment(loader=DictLoader(catalog.templates))
        self.env.globals.update(
            url_for=self._url_for,
            blogposts_featured=self._fetcher(post_index.featured(), skip_featured=False),
            blogposts_recent=self._fetcher(post_index.recent(), skip_featured=True),
            blogposts_tagged=self._fetcher(post_index.recent(), skip_featured=False),
            blogposts_all=self._fetcher(post_index.all(), skip_featured=False),
        )
        self.tags_and_counts = {'entries': [list(pair) for pair in post_index.tags_and_counts()]}
        self.archives = {
            'entries': [
                [year, month_name, [entry.to_dict() for entry in entries]]
                for year, month_name, entries in post_index.archives()
            ]
        }
        self.sitemap = sitemap.to_context()

    def _url_for(self, route=None, **bag):
        if not isinstance(route, str):
            raise TemplateRenderError("url_for needs a route")
        return url_for(self.config.routes, self.config.site_url, route, bag).url

    def _fetcher(self, entries, skip_featured):
        def fetch(count=None, tag=None):
            if isinstance(count, bool) or not isinstance(count, int):
                raise TemplateRenderError("invalid count")
            if tag is not None and not isinstance(tag, str):
                raise TemplateRenderError("invalid tag")
            selected = self.post_index.fetch(count, tag=tag, skip_featured=skip_featured, source=entries)
            return [entry.to_dict() for entry in selected]
        return fetch

    def build_context(self, record, html_content=None):
        metadata = record.metadata
        context = {
            'sitename': self.config.sitename,
            'title': metadata.title,
        }
        context.update(metadata.extra)
        context['navbar'] = self.navbar.for_url(record.url.url).to_context()
        if html_content is not None:
            context['content'] = html_content
        context['blog_tags_and_counts'] = self.tags_and_counts
        context['blog_archives'] = self.archives
        context['sitemap'] = self.sitemap
        context['url_for_this'] = record.url.url
        context['og_url'] = record.url.absolute
        context['og_type'] = metadata.og_type
        context['og_title'] = metadata.effective_og_title
        context['og_description'] = metadata.og_description
        return context

    def select_template(self, record, html_content):
        """The compiled template a record renders through."""
        metadata = record.metadata
        if metadata.markdown and metadata.template is not None:
            # Blog posts always land here; they need their template to exist
            source = self.catalog.source(metadata.template)
            return self.env.from_string(source.replace(CONTENT_PLACEHOLDER, html_content))
        if metadata.template is not None:
            return self.env.get_template(metadata.template)
        return self.env.from_string(record.raw_contents)

    def render(self, record):
        """Render one record and return its final text."""
        url = record.url.url
        html_content = None
        if record.metadata.markdown:
            html_content = markdown_to_html(record.raw_contents)
        try:
            template = self.select_template(record, html_content)
            return template.render(self.build_context(record, html_content))
        except QuireError:
            raise
        except TemplateNotFound as e:
            raise TemplateRenderError(f"Template '{e.name}' not found while generating {url}")
        except TemplateSyntaxError as e:
            raise TemplateRenderError(f"Template syntax error while generating {url} (line {e.lineno}): {e.message}")
        except TemplateError as e:
            raise TemplateRenderError(f"Error generating source for {url}: {e}")
