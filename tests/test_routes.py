"""Tests for route resolution."""

import pytest
import os

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from quire_pkg.errors import ConfigurationError
from quire_pkg.routes import URL, resolve_route, url_for

ROUTES = {
    'home': '/',
    'post': '/blog/{year}/{month}/{slug}',
    'tag': '/tags/{tag}',
    'page': '/page/{number}',
    'flag': '/flag/{enabled}',
    'nested': '/n/{outer}',
}


class TestUrlFor:
    """Test cases for url_for and resolve_route."""

    def test_static_route(self):
        assert url_for(ROUTES, 'https://example.com', 'home', {}) == URL('/', 'https://example.com/')

    def test_string_placeholders(self):
        bag = {'year': '2021', 'month': '03', 'slug': 'hello', 'title': 'ignored'}
        url = url_for(ROUTES, 'https://example.com', 'post', bag)
        assert url.url == '/blog/2021/03/hello'
        assert url.absolute == 'https://example.com/blog/2021/03/hello'

    def test_integer_placeholder(self):
        assert resolve_route(ROUTES, 'page', {'number': 2}) == '/page/2'

    def test_boolean_does_not_substitute(self):
        with pytest.raises(ConfigurationError, match="unresolved {enabled}"):
            resolve_route(ROUTES, 'flag', {'enabled': True})

    def test_placeholder_exposed_by_substitution(self):
        assert resolve_route(ROUTES, 'nested', {'outer': '{inner}', 'inner': 'x'}) == '/n/x'

    def test_cyclic_values_terminate(self):
        with pytest.raises(ConfigurationError):
            resolve_route(ROUTES, 'nested', {'outer': '{b}', 'b': '{outer}'})

    def test_unknown_route(self):
        with pytest.raises(ConfigurationError, match="No route defined for missing"):
            url_for(ROUTES, '', 'missing', {})

    def test_unresolved_placeholder(self):
        with pytest.raises(ConfigurationError, match="fully generated"):
            url_for(ROUTES, '', 'post', {'year': '2021', 'slug': 'hello'})

    def test_unbalanced_brace(self):
        routes = {'odd': '/odd/{slug'}
        with pytest.raises(ConfigurationError, match="fully generated"):
            resolve_route(routes, 'odd', {'slug': 'x'})

    def test_empty_site_url(self):
        assert url_for(ROUTES, '', 'tag', {'tag': 'python'}).absolute == '/tags/python'
