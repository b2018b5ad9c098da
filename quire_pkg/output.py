"""
Mapping URLs to output files and writing them out.
"""

import logging
import os
import shutil
from pathlib import PurePosixPath

from .errors import BuildIOError

DEFAULT_DOCUMENT = 'index.html'

logger = logging.getLogger('Quire.output')


def relative_output_path(url):
    """'/blog/post' -> '/blog/post/index.html'; URLs with an extension map to themselves."""
    path = PurePosixPath(url)
    if not path.suffix:
        path = path / DEFAULT_DOCUMENT
    return str(path)


def absolute_output_path(output_dir, relative_path):
    return os.path.join(output_dir, *PurePosixPath(relative_path.lstrip('/')).parts)


def create_output_dirs(paths):
    """Create the parent directory of every output path, once each."""
    directories = sorted({os.path.dirname(path) for path in paths})
    for directory in directories:
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise BuildIOError(directory, "Could not create directory", e)
    return directories


def copy_static_asset(record):
    try:
        shutil.copy2(record.absolute_source_path, record.absolute_output_path)
    except (IOError, OSError) as e:
        raise BuildIOError(
            f"{record.absolute_source_path} to {record.absolute_output_path}", "Unable to copy", e
        )
    logger.debug(f"Copied {record.source_path} -> {record.absolute_output_path}")


def write_rendered_page(record):
    try:
        with open(record.absolute_output_path, 'w', encoding='utf-8') as f:
            f.write(record.rendered_contents)
    except (IOError, OSError) as e:
        raise BuildIOError(record.absolute_output_path, "Unable to write output to", e)
    logger.debug(f"Generated {record.absolute_output_path}")
