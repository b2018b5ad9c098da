"""
Rebuild the site whenever something under the source directory changes.
"""

import logging
import os
import time

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .core import run
from .errors import QuireError

logger = logging.getLogger('Quire.watch')


class RebuildHandler(FileSystemEventHandler):
    """Run a fresh build for every relevant filesystem event."""

    def __init__(self, config, collect_errors=False, rebuild_delay=0.5, builder=run):
        super().__init__()
        self.config = config
        self.collect_errors = collect_errors
        self.rebuild_delay = rebuild_delay
        self.builder = builder
        self.last_rebuild = 0.0
        self.output_dir = os.path.abspath(config.output_dir)

    def event_path(self, event):
        # Moves are reported against their destination
        return getattr(event, 'dest_path', None) or event.src_path

    def should_rebuild(self, event):
        if event.is_directory:
            return False
        path = os.path.abspath(os.fsdecode(self.event_path(event)))
        # Writing the output must not trigger another build
        if path == self.output_dir or path.startswith(self.output_dir + os.sep):
            return False
        return event.event_type in ('created', 'modified', 'moved', 'deleted')

    def on_any_event(self, event):
        if not self.should_rebuild(event):
            return
        current_time = time.time()
        if current_time - self.last_rebuild < self.rebuild_delay:
            return
        self.last_rebuild = current_time
        logger.info(f"Rerunning generation after {event.event_type} {self.event_path(event)}")
        self.rebuild()

    def rebuild(self):
        """Run one build; a failure is logged and the watcher keeps going."""
        try:
            return self.builder(self.config, collect_errors=self.collect_errors)
        except QuireError as e:
            logger.error(f"Build failed: {e}")
        except Exception:
            logger.exception("Unexpected error during build")
        return None


def watch(config, collect_errors=False, observer=None):
    """Start watching config.source_dir; returns the running observer."""
    observer = observer or Observer()
    observer.schedule(RebuildHandler(config, collect_errors), config.source_dir, recursive=True)
    observer.start()
    logger.info(f"Watching {config.source_dir} for changes...")
    return observer
