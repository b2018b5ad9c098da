"""
Tag page expansion: one page per distinct blog tag for every tag page template.
"""

import logging

from .routes import url_for

logger = logging.getLogger('Quire.expand')


def expand_tag_pages(records, post_index, sitemap, routes, site_url):
    """
    Create a record for every (tag page template, tag) pair.

    Each new page gets a copy of its template's metadata with `tag` injected,
    and its URL is added to the sitemap. The sitemap is frozen afterwards.
    """
    tags = [tag for tag, _ in post_index.tags_and_counts()]
    expanded = []
    for template in [record for record in records if record.is_tag_page_template]:
        for tag in tags:
            metadata = template.metadata.copy()
            metadata.extra['tag'] = tag
            url = url_for(routes, site_url, metadata.route, metadata.extra)
            if not metadata.exclude_from_sitemap:
                sitemap.add(url.url)
            expanded.append(records.add(
                template.source_path,
                template.kind,
                metadata=metadata,
                raw_contents=template.raw_contents,
                url=url,
                expanded_from=template.record_id,
                absolute_source_path=template.absolute_source_path,
            ))
        logger.debug(f"Expanded {template.source_path} into {len(tags)} tag pages")
    sitemap.freeze()
    return expanded
