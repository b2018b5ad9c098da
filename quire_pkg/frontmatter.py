"""
Frontmatter parsing for Quire content files.

A content file starts with a JSON object whose closing brace sits alone on a
line followed by a blank line; everything after that blank line is the body:

    {
      "route": "blogpost",
      "title": "Hello"
    }

    Body text...
"""

import json
import logging
from pathlib import PurePath

from .errors import BuildIOError, ContentError, FrontmatterError
from .metadata import Kind, MetadataValueError, PageMetadata

OPENING = '{\n'
TERMINATOR = '\n}\n\n'

logger = logging.getLogger('Quire.frontmatter')


def parse_frontmatter(text, path):
    """Split text into its decoded JSON header and its body."""
    if not text.startswith(OPENING):
        raise FrontmatterError(path, "Metadata must start with '{' on its own line")
    split = text.find(TERMINATOR)
    if split == -1:
        raise FrontmatterError(path, "Need terminator for metadata")
    try:
        header = json.loads(text[:split + 2])
    except json.JSONDecodeError as e:
        raise FrontmatterError(path, f"Could not parse metadata ({e})")
    return header, text[split + len(TERMINATOR):]


def render_frontmatter(header, body):
    """Serialize a header mapping and a body into the content file format."""
    return json.dumps(header, indent=2, ensure_ascii=False) + '\n\n' + body


def _split_date(date, path):
    parts = date.split('/')
    if len(parts) != 3 or not all(part.isdigit() and part.isascii() for part in parts):
        raise ContentError(path, f"Blogpost has an invalid date '{date}'")
    year, month, day = parts
    return year.zfill(4), month.zfill(2), day.zfill(2)


def enrich_metadata(kind, metadata, source_path, blogpost_template):
    """
    Apply kind-specific enrichment and return a new PageMetadata.

    Only blog posts are enriched: they are always markdown, always use the
    configured blog post template and get slug, normalized date and
    year/month/day injected from their file name and `date` field.
    """
    if kind != Kind.BLOG_POST:
        return metadata

    enriched = metadata.copy()
    path = str(source_path)
    enriched.markdown = True
    enriched.template = blogpost_template
    enriched.extra['slug'] = PurePath(source_path).stem

    if 'date' not in enriched.extra:
        raise ContentError(path, "Blogpost is missing a date")
    try:
        date = enriched.extra.as_string('date')
    except MetadataValueError:
        raise ContentError(path, "Blogpost has a non-string date")
    year, month, day = _split_date(date, path)
    enriched.extra['date'] = f"{year}/{month}/{day}"
    enriched.extra['year'] = year
    enriched.extra['month'] = month
    enriched.extra['day'] = day

    enriched.og_type = 'article'
    excerpt = enriched.extra.get('excerpt')
    if isinstance(excerpt, str):
        enriched.og_description = excerpt
    return enriched


def load_content_file(absolute_path, source_path, kind, blogpost_template):
    """Read, parse and enrich one content file. Returns (metadata, body)."""
    try:
        with open(absolute_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (IOError, OSError, UnicodeDecodeError) as e:
        raise BuildIOError(str(absolute_path), "Unable to read file", e)

    header, body = parse_frontmatter(text, str(source_path))
    metadata = PageMetadata.from_header(header, str(source_path))
    metadata = enrich_metadata(kind, metadata, source_path, blogpost_template)
    logger.debug(f"Loaded {kind} {source_path}")
    return metadata, body
