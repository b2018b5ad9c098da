"""
Quire - a route-driven static site generator.

Quire loads static assets, Jinja2 templates and JSON-frontmatter content files,
indexes blog posts, expands one page per tag, renders everything and writes
the result to an output tree that mirrors the configured routes.
"""

__version__ = "1.0.0"

from .core import Quire, BuildResult, run
from .settings import QuireSettings, SiteConfig

__all__ = ['Quire', 'BuildResult', 'run', 'QuireSettings', 'SiteConfig']
