import os
import logging
import time
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, as_completed

from .errors import ConfigurationError, ContentError, ErrorCollector
from .expand import expand_tag_pages
from .frontmatter import load_content_file
from .index import build_post_index, build_sitemap
from .metadata import Kind
from .navigation import build_navbar
from .output import (
    absolute_output_path,
    copy_static_asset,
    create_output_dirs,
    relative_output_path,
    write_rendered_page,
)
from .records import RecordSet
from .render import Renderer, TemplateCatalog
from .routes import URL, url_for
from .utils import expand_glob, to_posix

# Below this many items a stage runs inline; thread start-up costs more than it saves
PARALLEL_THRESHOLD = 12


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Total pages rendered:",
            "Total assets copied:",
            "Loading sources",
            "Building indices",
            "Expanded",
            "Rendering",
            "Writing output",
            "Rerunning generation",
            "Watching",
            "Serving",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def setup_logging(verbose=False, log_dir=None):
    """Set up the Quire logger: filtered console output plus an optional debug log file."""
    logger = logging.getLogger('Quire')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        # Console handler with filter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        if not verbose:
            console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        # File handler for all logs
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('quire_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)
    return logger


def run_parallel(func, items, workers=None, collector=None):
    """
    Apply func to every item, on a thread pool for larger workloads.

    Results come back in item order. The first QuireError aborts the stage,
    except ContentErrors that collector chooses to keep.
    """
    items = list(items)
    results = [None] * len(items)

    def handle(position, call):
        try:
            results[position] = call()
        except ContentError as e:
            if collector is None:
                raise
            collector.add(e)

    if len(items) < PARALLEL_THRESHOLD or workers == 1:
        for position, item in enumerate(items):
            handle(position, lambda item=item: func(item))
        return results

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(func, item): position for position, item in enumerate(items)}
        try:
            for future in as_completed(futures):
                handle(futures[future], future.result)
        except BaseException:
            for future in futures:
                future.cancel()
            raise
    return results


class BuildResult:
    """Everything one run produced, for reporting and inspection."""

    def __init__(self, records, navbar, post_index, sitemap, catalog, elapsed):
        self.records = records
        self.navbar = navbar
        self.post_index = post_index
        self.sitemap = sitemap
        self.catalog = catalog
        self.elapsed = elapsed

    @property
    def pages_rendered(self):
        return sum(1 for record in self.records if record.rendered_contents is not None)

    @property
    def assets_copied(self):
        return sum(1 for record in self.records if record.is_static_asset)


class Quire:
    """
    One build of a site.

    build() runs the stages in order; every stage finishes for all records
    before the next one starts, because later stages read aggregates built
    from the complete record set. A Quire instance is good for a single run.
    """

    def __init__(self, config, collect_errors=False):
        self.config = config
        self.collect_errors = collect_errors
        self.workers = config.workers or os.cpu_count()
        self.logger = logging.getLogger('Quire.core')
        self.records = RecordSet()

    def _collector(self):
        return ErrorCollector(collect=self.collect_errors)

    # Stage 1
    def create_source_loaders(self):
        """Group the configured source globs by kind, preserving declaration order."""
        loaders = {kind: [] for kind in Kind.ALL}
        for pattern, kind in self.config.sources.items():
            loaders[kind].append(pattern)
        return loaders

    # Stage 2
    def load_static_assets(self, patterns):
        for pattern in patterns:
            for absolute, relative in expand_glob(self.config.source_dir, pattern):
                url = '/' + to_posix(relative)
                self.records.add(
                    relative, Kind.STATIC_ASSET,
                    url=URL(url, f"{self.config.site_url}{url}"),
                    absolute_source_path=absolute,
                )

    def load_templates(self, patterns):
        catalog = TemplateCatalog()
        for pattern in patterns:
            catalog.load_glob(self.config.source_dir, pattern)
        return catalog

    def load_content(self, loaders):
        sources = []
        for kind in Kind.CONTENT:
            for pattern in loaders[kind]:
                sources.extend((kind, absolute, relative)
                               for absolute, relative in expand_glob(self.config.source_dir, pattern))

        def load(source):
            kind, absolute, relative = source
            return load_content_file(absolute, relative, kind, self.config.blogpost_template)

        collector = self._collector()
        loaded = run_parallel(load, sources, self.workers, collector)
        collector.raise_if_any()
        for (kind, absolute, relative), (metadata, body) in zip(sources, loaded):
            self.records.add(relative, kind, metadata=metadata, raw_contents=body,
                             absolute_source_path=absolute)

    def load_sources(self, loaders):
        self.logger.info("Loading sources...")
        self.load_static_assets(loaders[Kind.STATIC_ASSET])
        catalog = self.load_templates(loaders[Kind.TEMPLATE])
        self.load_content(loaders)
        self.logger.debug(f"Loaded {len(self.records)} records and {len(catalog)} templates")
        return catalog

    # Stage 3
    def resolve_urls(self):
        """Resolve a URL for every content record; tag page templates wait for expansion."""
        for record in self.records:
            if record.is_static_asset or record.is_tag_page_template:
                continue
            try:
                record.url = url_for(self.config.routes, self.config.site_url,
                                     record.metadata.route, record.metadata.extra)
            except ConfigurationError as e:
                raise ConfigurationError(f"{e} (in {record.source_path})") from e

    # Stage 4
    def build_indices(self):
        self.logger.info("Building indices...")
        navbar = build_navbar(
            (record.url.url, record.metadata.title, record.metadata.navbar)
            for record in self.records.with_url()
            if record.metadata is not None and record.metadata.navbar is not None
        )
        collector = self._collector()
        post_index = build_post_index(
            ((record.url.url, record.metadata, str(record.source_path))
             for record in self.records.of_kind(Kind.BLOG_POST)),
            collector,
        )
        collector.raise_if_any()
        sitemap = build_sitemap(self.records)
        return navbar, post_index, sitemap

    # Stage 5
    def expand_content(self, post_index, sitemap):
        expanded = expand_tag_pages(self.records, post_index, sitemap,
                                    self.config.routes, self.config.site_url)
        self.logger.info(f"Expanded {len(expanded)} tag pages")
        return expanded

    # Stage 6
    def map_output_paths(self):
        for record in self.records.with_url():
            if record.is_static_asset:
                # Assets keep their source layout, extension or not
                record.output_path = record.url.url
            else:
                record.output_path = relative_output_path(record.url.url)

    def render_pages(self, renderer):
        pages = [record for record in self.records.with_url() if not record.is_static_asset]
        self.logger.info(f"Rendering {len(pages)} pages...")
        rendered = run_parallel(renderer.render, pages, self.workers)
        for record, contents in zip(pages, rendered):
            record.rendered_contents = contents

    # Stage 7
    def make_paths_absolute(self):
        for record in self.records.with_url():
            record.absolute_output_path = absolute_output_path(self.config.output_dir, record.output_path)

    # Stage 8
    def persist_output(self):
        records = self.records.with_url()
        self.logger.info(f"Writing output to {self.config.output_dir}...")
        create_output_dirs(record.absolute_output_path for record in records)
        run_parallel(copy_static_asset, [r for r in records if r.is_static_asset], self.workers)
        run_parallel(write_rendered_page, [r for r in records if not r.is_static_asset], self.workers)

    def build(self):
        """Main build process."""
        start_time = time.time()
        loaders = self.create_source_loaders()
        catalog = self.load_sources(loaders)
        self.resolve_urls()
        navbar, post_index, sitemap = self.build_indices()
        self.expand_content(post_index, sitemap)
        self.map_output_paths()
        self.render_pages(Renderer(self.config, catalog, navbar, post_index, sitemap))
        self.make_paths_absolute()
        self.persist_output()

        result = BuildResult(list(self.records), navbar, post_index, sitemap, catalog,
                             time.time() - start_time)
        self.logger.info(f"Site build completed in {result.elapsed:.6f} seconds.")
        self.logger.info(f"Total pages rendered: {result.pages_rendered}")
        self.logger.info(f"Total assets copied: {result.assets_copied}")
        return result


def run(config, collect_errors=False):
    """Run the pipeline once on config."""
    return Quire(config, collect_errors=collect_errors).build()
