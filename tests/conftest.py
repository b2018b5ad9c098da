"""Test configuration and fixtures for Quire tests."""

import pytest
import tempfile
import shutil
import os
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from quire_pkg.frontmatter import render_frontmatter
from quire_pkg.settings import SiteConfig

ROUTES = {
    'index': '/',
    'about': '/about',
    'team': '/about/team',
    'contact': '/contact',
    'blogpost': '/blog/{year}/{month}/{slug}',
    'tag': '/tags/{tag}',
    'archive': '/archive',
    'rss': '/feed.xml',
    'sitemap': '/sitemap.xml',
}

SOURCES = {
    'static/**/*': 'StaticAsset',
    'templates/**/*.html': 'Template',
    'pages/*.html': 'SinglePage',
    'posts/*.md': 'BlogPost',
    'tags/*.html': 'TagPageTemplate',
    'archive.html': 'ArchivePageTemplate',
    'feed.xml': 'RssTemplate',
    'sitemap.xml': 'SitemapTemplate',
}

BASE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>{{ title }} | {{ sitename }}</title>
    <meta property="og:title" content="{{ og_title }}">
    <meta property="og:url" content="{{ og_url }}">
</head>
<body>
<nav>
{% for entry in navbar.entries %}<a href="{{ entry.url }}"{% if entry.active %} class="active"{% endif %}>{{ entry.title }}</a>
{% for child in entry.children %}<a href="{{ child.url }}"{% if child.active %} class="active"{% endif %}>{{ child.title }}</a>
{% endfor %}{% endfor %}
</nav>
{% block body %}{% endblock %}
</body>
</html>"""

BLOGPOST_TEMPLATE = """{% extends "base.html" %}
{% block body %}
<article>
<h1>{{ title }}</h1>
{{ content | safe }}
</article>
{% endblock %}"""

PAGE_TEMPLATE = """{% extends "base.html" %}
{% block body %}<main>{{ body_text }}</main>{% endblock %}"""


def write_content(path, header, body=''):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_frontmatter(header, body), encoding='utf-8')
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def make_content():
    """Write a content file with a JSON header."""
    return write_content


@pytest.fixture
def site_dir(temp_dir):
    """Create a complete sample site source tree."""
    source = Path(temp_dir) / 'site'

    templates = source / 'templates'
    templates.mkdir(parents=True)
    (templates / 'base.html').write_text(BASE_TEMPLATE)
    (templates / 'blogpost.html').write_text(BLOGPOST_TEMPLATE)
    (templates / 'page.html').write_text(PAGE_TEMPLATE)

    static = source / 'static' / 'css'
    static.mkdir(parents=True)
    (static / 'style.css').write_bytes(b'body { color: #333; }\n')

    write_content(source / 'pages' / 'index.html', {
        'route': 'index',
        'title': 'Home',
        'navbar': {'index': 0},
    }, '{% extends "base.html" %}{% block body %}'
       '{% for post in blogposts_recent(count=10) %}<p>{{ post.title }}</p>{% endfor %}'
       '{% for post in blogposts_featured(count=10) %}<em>{{ post.title }}</em>{% endfor %}'
       '{% endblock %}')
    write_content(source / 'pages' / 'about.html', {
        'route': 'about',
        'title': 'About',
        'template': 'page.html',
        'navbar': {'index': 2, 'group': 'about', 'is_primary': True},
        'body_text': 'About us',
    })
    write_content(source / 'pages' / 'team.html', {
        'route': 'team',
        'title': 'Team',
        'template': 'page.html',
        'navbar': {'index': 1, 'group': 'about'},
        'body_text': 'The team',
    })
    write_content(source / 'pages' / 'contact.html', {
        'route': 'contact',
        'title': 'Contact',
        'template': 'page.html',
        'navbar': 1,
        'body_text': 'Write to us',
    })

    write_content(source / 'posts' / 'first-post.md', {
        'route': 'blogpost',
        'title': 'First Post',
        'date': '2021/3/7',
        'excerpt': 'The very first post',
        'tags': ['python', 'web'],
    }, '# First\n\nWelcome to {{ sitename }}.\n')
    write_content(source / 'posts' / 'second-post.md', {
        'route': 'blogpost',
        'title': 'Second Post',
        'date': '2022/01/15',
        'excerpt': 'A featured post',
        'tags': ['python', 42],
        'featured': True,
    }, 'Second body with *emphasis*.\n')

    write_content(source / 'tags' / 'tag.html', {
        'route': 'tag',
        'title': 'Tagged',
    }, '<h1>{{ tag }}</h1>{% for post in blogposts_tagged(count=10, tag=tag) %}<li>{{ post.slug }}</li>{% endfor %}')

    write_content(source / 'archive.html', {
        'route': 'archive',
        'title': 'Archive',
    }, '{% for year, month, posts in blog_archives.entries %}'
       '<h2>{{ month }} {{ year }}</h2>{% for post in posts %}<li>{{ post.title }}</li>{% endfor %}'
       '{% endfor %}')

    write_content(source / 'feed.xml', {
        'route': 'rss',
        'title': 'Feed',
    }, '<rss>{% for post in blogposts_all(count=10) %}<item>{{ post.url }}</item>{% endfor %}</rss>')

    write_content(source / 'sitemap.xml', {
        'route': 'sitemap',
        'title': 'Sitemap',
        'exclude_from_sitemap': True,
    }, '<urlset>{% for url in sitemap.entries %}<loc>https://example.com{{ url }}</loc>{% endfor %}</urlset>')

    return str(source)


@pytest.fixture
def output_dir(temp_dir):
    """Output directory path; not created so tests can check nothing was written."""
    return os.path.join(temp_dir, 'output')


@pytest.fixture
def site_config(site_dir, output_dir):
    """SiteConfig for the sample site."""
    return SiteConfig(
        source_dir=site_dir,
        output_dir=output_dir,
        sitename='Test Site',
        site_url='https://example.com',
        sources=SOURCES,
        routes=ROUTES,
        blogpost_template='blogpost.html',
        workers=2,
    )
