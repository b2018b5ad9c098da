"""
Typed page metadata parsed from a content file's JSON header.
"""

import copy
from typing import Any, Dict, List, Optional

from .errors import FrontmatterError


class Kind:
    """Source kinds accepted in the `sources` section of the configuration."""
    STATIC_ASSET = 'StaticAsset'
    TEMPLATE = 'Template'
    SINGLE_PAGE = 'SinglePage'
    BLOG_POST = 'BlogPost'
    TAG_PAGE_TEMPLATE = 'TagPageTemplate'
    ARCHIVE_PAGE_TEMPLATE = 'ArchivePageTemplate'
    RSS_TEMPLATE = 'RssTemplate'
    SITEMAP_TEMPLATE = 'SitemapTemplate'

    # Kinds that become content records with a frontmatter header
    CONTENT = (
        SINGLE_PAGE,
        BLOG_POST,
        TAG_PAGE_TEMPLATE,
        ARCHIVE_PAGE_TEMPLATE,
        RSS_TEMPLATE,
        SITEMAP_TEMPLATE,
    )
    ALL = (STATIC_ASSET, TEMPLATE) + CONTENT


class MetadataValueError(ValueError):
    """A metadata value is missing or has the wrong type."""

    def __init__(self, key, expected):
        self.key = key
        self.expected = expected
        super().__init__(f"'{key}' must be {expected}")


_MISSING = object()


class MetadataBag(dict):
    """
    Open-ended key/value metadata with explicit, fallible accessors.

    Values are whatever JSON produced: str, int, float, bool, None, list or
    dict. The accessors never coerce; a value of the wrong type raises
    MetadataValueError, and so does a missing key unless a default is given.
    """

    def _get(self, key, default):
        if key in self:
            return self[key]
        if default is _MISSING:
            raise MetadataValueError(key, 'present')
        return default

    def as_string(self, key: str, default: Any = _MISSING) -> str:
        value = self._get(key, default)
        if not isinstance(value, str):
            raise MetadataValueError(key, 'a string')
        return value

    def as_integer(self, key: str, default: Any = _MISSING) -> int:
        value = self._get(key, default)
        # bool is an int subclass but never a valid integer here
        if isinstance(value, bool) or not isinstance(value, int):
            raise MetadataValueError(key, 'an integer')
        return value

    def as_boolean(self, key: str, default: Any = _MISSING) -> bool:
        value = self._get(key, default)
        if not isinstance(value, bool):
            raise MetadataValueError(key, 'a boolean')
        return value

    def as_list(self, key: str, default: Any = _MISSING) -> list:
        value = self._get(key, default)
        if not isinstance(value, list):
            raise MetadataValueError(key, 'a list')
        return value

    def as_mapping(self, key: str, default: Any = _MISSING) -> dict:
        value = self._get(key, default)
        if not isinstance(value, dict):
            raise MetadataValueError(key, 'a mapping')
        return value

    def copy(self) -> 'MetadataBag':
        return MetadataBag(copy.deepcopy(dict(self)))


class NavbarPlacement:
    """Where a page shows up in the navigation tree."""

    def __init__(self, index: int, group: Optional[str] = None, is_primary: bool = False):
        self.index = index
        self.group = group
        self.is_primary = is_primary

    @classmethod
    def from_value(cls, value, path):
        # A bare integer is shorthand for an ungrouped entry
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if not isinstance(value, dict):
            raise FrontmatterError(path, "'navbar' must be an integer or a mapping")
        bag = MetadataBag(value)
        try:
            index = bag.as_integer('index')
            group = bag.as_string('group', None) if bag.get('group') is not None else None
            is_primary = bag.as_boolean('is_primary', False)
        except MetadataValueError as e:
            raise FrontmatterError(path, f"Invalid navbar placement, {e}")
        unknown = set(value) - {'index', 'group', 'is_primary'}
        if unknown:
            raise FrontmatterError(path, f"Unknown navbar keys {sorted(unknown)}")
        return cls(index, group, is_primary)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'index': self.index}
        if self.group is not None:
            data['group'] = self.group
        if self.is_primary:
            data['is_primary'] = True
        return data

    def __repr__(self):
        return f"NavbarPlacement(index={self.index!r}, group={self.group!r}, is_primary={self.is_primary!r})"


class PageMetadata:
    """The typed header of a content file plus its free-form metadata bag."""

    KNOWN_FIELDS = (
        'route', 'title', 'template', 'navbar', 'markdown',
        'exclude_from_sitemap', 'og_title', 'og_type', 'og_description',
    )

    def __init__(self, route, title, template=None, navbar=None, markdown=False,
                 exclude_from_sitemap=False, og_title='', og_type='', og_description='',
                 extra=None):
        self.route = route
        self.title = title
        self.template = template
        self.navbar = navbar
        self.markdown = markdown
        self.exclude_from_sitemap = exclude_from_sitemap
        self.og_title = og_title
        self.og_type = og_type
        self.og_description = og_description
        self.extra = MetadataBag(extra or {})

    @classmethod
    def from_header(cls, header, path):
        """Validate a decoded JSON header against the metadata shape."""
        if not isinstance(header, dict):
            raise FrontmatterError(path, "Metadata header must be a JSON object")
        bag = MetadataBag(header)
        try:
            route = bag.as_string('route')
            title = bag.as_string('title')
            template = bag.as_string('template') if bag.get('template') is not None else None
            markdown = bag.as_boolean('markdown', False)
            exclude = bag.as_boolean('exclude_from_sitemap', False)
            og_title = bag.as_string('og_title', '')
            og_type = bag.as_string('og_type', '')
            og_description = bag.as_string('og_description', '')
        except MetadataValueError as e:
            raise FrontmatterError(path, f"Could not parse metadata, {e}")

        navbar = None
        if header.get('navbar') is not None:
            navbar = NavbarPlacement.from_value(header['navbar'], path)

        extra = {k: v for k, v in header.items() if k not in cls.KNOWN_FIELDS}
        return cls(route, title, template=template, navbar=navbar, markdown=markdown,
                   exclude_from_sitemap=exclude, og_title=og_title, og_type=og_type,
                   og_description=og_description, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to a header mapping; defaults are omitted."""
        data: Dict[str, Any] = {'route': self.route, 'title': self.title}
        if self.template is not None:
            data['template'] = self.template
        if self.navbar is not None:
            data['navbar'] = self.navbar.to_dict()
        if self.markdown:
            data['markdown'] = True
        if self.exclude_from_sitemap:
            data['exclude_from_sitemap'] = True
        for key in ('og_title', 'og_type', 'og_description'):
            if getattr(self, key):
                data[key] = getattr(self, key)
        data.update(self.extra)
        return data

    def copy(self) -> 'PageMetadata':
        return copy.deepcopy(self)

    @property
    def effective_og_title(self) -> str:
        return self.og_title or self.title

    def __repr__(self):
        return f"PageMetadata(route={self.route!r}, title={self.title!r})"


def tag_list(values) -> List[str]:
    """Keep only the string entries of a tags value."""
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, str)]
