"""
Route resolution: turn a route name and a metadata bag into a URL.
"""

import re
from typing import Mapping

from .errors import ConfigurationError

PLACEHOLDER_RE = re.compile(r'\{[^{}]*\}')


class URL:
    """A resolved URL, relative to the site root and absolute."""

    def __init__(self, url: str, absolute: str):
        self.url = url
        self.absolute = absolute

    def __eq__(self, other):
        return isinstance(other, URL) and (self.url, self.absolute) == (other.url, other.absolute)

    def __hash__(self):
        return hash((self.url, self.absolute))

    def __repr__(self):
        return f"URL({self.url!r}, {self.absolute!r})"


def _substitution(value):
    # Only strings and integers fill placeholders; bool is excluded explicitly
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def resolve_route(routes: Mapping[str, str], route: str, bag: Mapping) -> str:
    """Fill the placeholders of a route template from bag."""
    if route not in routes:
        raise ConfigurationError(f"No route defined for {route}")
    url = routes[route]

    # Each pass may expose new placeholders; stop once a pass changes nothing
    for _ in range(len(bag) + 1):
        if '{' not in url:
            break
        before = url
        for key, value in bag.items():
            token = '{' + str(key) + '}'
            replacement = _substitution(value)
            if replacement is not None and token in url:
                url = url.replace(token, replacement)
        if url == before:
            break

    unresolved = PLACEHOLDER_RE.findall(url)
    if not unresolved and '{' in url:
        # An unbalanced brace is never valid in a generated URL
        unresolved = [url[url.index('{'):]]
    if unresolved:
        raise ConfigurationError(
            f"URL should be fully generated for route '{route}': {url} "
            f"(unresolved {', '.join(unresolved)})"
        )
    return url


def url_for(routes: Mapping[str, str], site_url: str, route: str, bag: Mapping) -> URL:
    """Resolve a route to both its relative and absolute URL."""
    url = resolve_route(routes, route, bag)
    return URL(url, f"{site_url}{url}")
