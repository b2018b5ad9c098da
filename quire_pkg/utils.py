import glob
import os
from pathlib import PurePosixPath

WILDCARDS = ('*', '?', '[')


def has_wildcard(part):
    return any(char in part for char in WILDCARDS)


def glob_base(pattern):
    """Literal directory prefix of a glob pattern, e.g. 'templates' for 'templates/**/*.html'."""
    parts = PurePosixPath(pattern.replace(os.sep, '/')).parts
    literal = []
    for part in parts:
        if has_wildcard(part):
            break
        literal.append(part)
    else:
        # No wildcard at all: the pattern names a single file
        literal = literal[:-1]
    return os.path.join(*literal) if literal else ''


def expand_glob(source_dir, pattern):
    """Files matching pattern under source_dir, as sorted (absolute, relative) pairs."""
    # Dotfiles such as .htaccess and .well-known/ are sources too
    matches = glob.glob(os.path.join(source_dir, pattern), recursive=True, include_hidden=True)
    files = []
    for path in sorted(matches):
        if os.path.isfile(path):
            files.append((path, os.path.relpath(path, source_dir)))
    return files


def to_posix(path):
    return str(path).replace(os.sep, '/')
