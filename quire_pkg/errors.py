"""
Exception hierarchy for Quire builds.

Every failure that aborts a run derives from QuireError so callers (the CLI and
the watcher) can isolate a failed build with a single except clause.
"""

from typing import List, Optional


class QuireError(Exception):
    """Base class for every failure that aborts a build."""


class ConfigurationError(QuireError):
    """The run cannot proceed: bad settings, routes or navbar layout."""


class FrontmatterError(ConfigurationError):
    """A content file's metadata header is missing or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason} in {path}")


class ContentError(QuireError):
    """A single content file is invalid."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ContentErrors(QuireError):
    """Several content errors accumulated during one stage."""

    def __init__(self, errors: List[ContentError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} content error(s):"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))


class BuildIOError(QuireError):
    """A source could not be read or an output could not be written."""

    def __init__(self, path: str, reason: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"{reason} {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class TemplateRenderError(QuireError):
    """A template is missing, unparseable or failed while rendering."""


class ErrorCollector:
    """
    Decide what happens to ContentErrors raised inside a stage.

    In the default mode errors propagate immediately. When collecting, errors
    are remembered and raised together by raise_if_any() at the stage barrier.
    """

    def __init__(self, collect: bool = False):
        self.collect = collect
        self.errors: List[ContentError] = []

    def add(self, error: ContentError) -> None:
        if not self.collect:
            raise error
        self.errors.append(error)

    def raise_if_any(self) -> None:
        if self.errors:
            errors, self.errors = self.errors, []
            raise ContentErrors(errors)
