"""
Content records and the per-run arena that owns them.
"""

from .metadata import Kind


class ContentRecord:
    """
    One source file, or one page synthesized from a template, moving through
    the pipeline. Attributes are filled in stage by stage.
    """

    def __init__(self, record_id, source_path, kind, metadata=None, raw_contents=None,
                 url=None, expanded_from=None, absolute_source_path=None):
        self.record_id = record_id
        self.source_path = source_path
        self.absolute_source_path = absolute_source_path
        self.kind = kind
        self.metadata = metadata
        self.raw_contents = raw_contents
        self.url = url
        self.expanded_from = expanded_from
        self.output_path = None
        self.absolute_output_path = None
        self.rendered_contents = None

    @property
    def is_static_asset(self):
        return self.kind == Kind.STATIC_ASSET

    @property
    def exclude_from_sitemap(self):
        return self.metadata is not None and self.metadata.exclude_from_sitemap

    @property
    def is_tag_page_template(self):
        # Expanded tag pages keep the kind but carry a URL
        return self.kind == Kind.TAG_PAGE_TEMPLATE and self.expanded_from is None

    def __repr__(self):
        url = self.url.url if self.url is not None else None
        return f"ContentRecord({self.record_id}, {self.kind}, {str(self.source_path)!r}, url={url!r})"


class RecordSet:
    """Append-only arena of records; ids are stable for the whole run."""

    def __init__(self):
        self._records = []

    def add(self, source_path, kind, **kwargs):
        record = ContentRecord(len(self._records), source_path, kind, **kwargs)
        self._records.append(record)
        return record

    def get(self, record_id):
        return self._records[record_id]

    def of_kind(self, kind):
        return [record for record in self._records if record.kind == kind]

    def with_url(self):
        return [record for record in self._records if record.url is not None]

    def __iter__(self):
        return iter(list(self._records))

    def __len__(self):
        return len(self._records)
