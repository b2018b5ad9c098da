"""
Navigation tree built from pages that declare a navbar placement.
"""

from collections import OrderedDict

from .errors import ConfigurationError


class NavbarEntry:
    """A single entry in the navbar, optionally with child entries."""

    def __init__(self, url, title, index, active=False, children=None):
        self.url = url
        self.title = title
        self.index = index
        self.active = active
        self.children = list(children or [])

    def is_active_for(self, url):
        return self.url == url or (self.url != '/' and url.startswith(self.url))

    def for_url(self, url):
        return NavbarEntry(
            self.url, self.title, self.index,
            active=self.is_active_for(url),
            children=[child.for_url(url) for child in self.children],
        )

    def to_dict(self):
        return {
            'url': self.url,
            'title': self.title,
            'active': self.active,
            'children': [child.to_dict() for child in self.children],
        }

    def __repr__(self):
        return f"NavbarEntry({self.url!r}, {self.title!r}, index={self.index!r})"


class Navbar:
    """Ordered forest of navbar entries shared by every rendered page."""

    def __init__(self, entries=None):
        self.entries = list(entries or [])

    def for_url(self, url):
        """Copy of the tree with active flags set for the page at url."""
        return Navbar([entry.for_url(url) for entry in self.entries])

    def to_context(self):
        return {'entries': [entry.to_dict() for entry in self.entries]}


def build_navbar(candidates):
    """
    Build the navbar from (url, title, placement) tuples.

    Ungrouped entries are top level. Each group needs exactly one primary
    entry, which becomes the parent of the rest of the group.
    """
    top_level = []
    groups = OrderedDict()
    for url, title, placement in candidates:
        entry = NavbarEntry(url, title, placement.index)
        if placement.group is None:
            top_level.append(entry)
        else:
            groups.setdefault(placement.group, []).append((placement, entry))

    for group, members in groups.items():
        primaries = [entry for placement, entry in members if placement.is_primary]
        if not primaries:
            raise ConfigurationError(f"Navbar group '{group}' has no primary entry")
        if len(primaries) > 1:
            urls = ', '.join(entry.url for entry in primaries)
            raise ConfigurationError(f"Navbar group '{group}' has more than one primary entry: {urls}")
        parent = primaries[0]
        parent.children = sorted(
            (entry for placement, entry in members if not placement.is_primary),
            key=lambda e: e.index,
        )
        top_level.append(parent)

    return Navbar(sorted(top_level, key=lambda e: e.index))
