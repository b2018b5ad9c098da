"""
Site-wide indices: the chronological blog post index and the sitemap.
"""

from collections import Counter, OrderedDict

from .errors import ContentError, ErrorCollector, QuireError
from .metadata import MetadataValueError, tag_list

MONTH_NAMES = {
    '01': 'January',
    '02': 'February',
    '03': 'March',
    '04': 'April',
    '05': 'May',
    '06': 'June',
    '07': 'July',
    '08': 'August',
    '09': 'September',
    '10': 'October',
    '11': 'November',
    '12': 'December',
}


class PostIndexEntry:
    """One blog post as seen by listing pages."""

    FIELDS = ('url', 'slug', 'title', 'excerpt', 'date', 'year', 'month',
              'month_name', 'day', 'tags', 'featured')

    def __init__(self, url, slug, title, excerpt, date, year, month, month_name, day,
                 tags=None, featured=False):
        self.url = url
        self.slug = slug
        self.title = title
        self.excerpt = excerpt
        self.date = date
        self.year = year
        self.month = month
        self.month_name = month_name
        self.day = day
        self.tags = list(tags or [])
        self.featured = featured

    def to_dict(self):
        return {field: getattr(self, field) for field in self.FIELDS}

    def __repr__(self):
        return f"PostIndexEntry({self.url!r}, date={self.date!r})"


def index_entry(url, metadata, path):
    """Project a blog post's metadata into an index entry."""
    bag = metadata.extra
    # slug, date and year/month/day were validated and injected at load time
    month = bag['month']
    if month not in MONTH_NAMES:
        raise ContentError(path, f"Invalid month: {month} for URL {url}")
    try:
        excerpt = bag.as_string('excerpt')
    except MetadataValueError:
        if 'excerpt' not in bag:
            raise ContentError(path, f"No excerpt provided for blogpost at {url}")
        raise ContentError(path, f"Excerpt is not a string for blogpost at {url}")
    featured = bag.get('featured', False)
    return PostIndexEntry(
        url=url,
        slug=bag['slug'],
        title=metadata.title,
        excerpt=excerpt,
        date=bag['date'],
        year=bag['year'],
        month=month,
        month_name=MONTH_NAMES[month],
        day=bag['day'],
        tags=tag_list(bag.get('tags', [])),
        featured=featured if isinstance(featured, bool) else False,
    )


class PostIndex:
    """
    All blog posts, newest first.

    Dates are zero-padded YYYY/MM/DD strings, so sorting the strings is the
    same as sorting chronologically.
    """

    def __init__(self, entries=None):
        self.entries = sorted(entries or [], key=lambda e: e.date, reverse=True)

    def featured(self):
        return [entry for entry in self.entries if entry.featured]

    def recent(self):
        return list(self.entries)

    def all(self):
        return list(self.entries)

    def tags_and_counts(self):
        """(tag, count) pairs, most used first, ties by tag name descending."""
        counts = Counter(tag for entry in self.entries for tag in entry.tags)
        return sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)

    def archives(self):
        """(year, month_name, entries) groups, newest month first."""
        groups = OrderedDict()
        for entry in self.entries:
            groups.setdefault((entry.year, entry.month), []).append(entry)
        return [
            (year, MONTH_NAMES[month], entries)
            for (year, month), entries in sorted(groups.items(), key=lambda item: item[0], reverse=True)
        ]

    def fetch(self, count, tag=None, skip_featured=False, source=None):
        """Up to count entries, optionally limited to a tag or to non-featured posts."""
        entries = self.entries if source is None else source
        selected = []
        for entry in entries:
            if len(selected) >= count:
                break
            if skip_featured and entry.featured:
                continue
            if tag is not None and tag not in entry.tags:
                continue
            selected.append(entry)
        return selected


def build_post_index(posts, collector=None):
    """
    Build the PostIndex from (url, metadata, path) tuples of blog posts.

    Invalid posts raise ContentError, or are reported to collector and left
    out when it is collecting.
    """
    collector = collector or ErrorCollector()
    entries = []
    for url, metadata, path in posts:
        try:
            entries.append(index_entry(url, metadata, path))
        except ContentError as e:
            collector.add(e)
    return PostIndex(entries)


class Sitemap:
    """
    Sorted, deduplicated URLs of every page.

    The sitemap grows while tag pages are expanded and is frozen before
    rendering; adding to a frozen sitemap is an error.
    """

    def __init__(self, urls=None):
        self._urls = set(urls or [])
        self._entries = sorted(self._urls)
        self.frozen = False

    def add(self, url):
        if self.frozen:
            raise QuireError(f"Cannot add {url} to a frozen sitemap")
        self._urls.add(url)

    def freeze(self):
        self._entries = sorted(self._urls)
        self.frozen = True
        return self

    @property
    def entries(self):
        if not self.frozen:
            return sorted(self._urls)
        return list(self._entries)

    def __contains__(self, url):
        return url in self._urls

    def __len__(self):
        return len(self._urls)

    def to_context(self):
        return {'entries': self.entries}


def build_sitemap(records):
    """Initial sitemap from every non-asset record with a URL that is not excluded."""
    return Sitemap(
        record.url.url
        for record in records
        if record.url is not None and not record.is_static_asset and not record.exclude_from_sitemap
    )
